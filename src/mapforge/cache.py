"""On-disk generator cache and leftover generated-map cleanup."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from mapforge.errors import MapGeneratorErrorCode
from mapforge.naming import GENERATED_MAP_PATTERN, executable_filename

_LOGGER = logging.getLogger(__name__)

GENERATOR_EXECUTABLE_SUB_DIRECTORY = "map_generator"


class ArtifactCacheEntry(BaseModel):
    """Presence snapshot for one generator version."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str
    local_path: Path
    present: bool


class SweepReport(BaseModel):
    """Outcome of one stale-output sweep."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    deleted: tuple[Path, ...] = ()
    failed: tuple[Path, ...] = ()


class ArtifactCache:
    """Resolve and stat generator executables under one cache root."""

    def __init__(self, root: Path) -> None:
        """Create cache root when missing.

        Creation failure is logged; later presence checks report false.

        Args:
            root: Directory holding generator executables.
        """
        self._root = root
        if not root.exists():
            try:
                root.mkdir(parents=True, exist_ok=True)
            except OSError:
                _LOGGER.exception(
                    "Could not create map generator executable directory %s", root
                )

    @property
    def root(self) -> Path:
        """Cache root directory."""
        return self._root

    def executable_path(self, version: str) -> Path:
        """Return expected executable path for `version`."""
        return self._root / executable_filename(version)

    def lookup(self, version: str) -> ArtifactCacheEntry:
        """Build a fresh cache entry for `version`.

        Args:
            version: Generator version.

        Returns:
            Entry with presence re-read from disk.
        """
        path = self.executable_path(version)
        return ArtifactCacheEntry(
            version=version, local_path=path, present=path.exists()
        )

    def exists(self, version: str) -> bool:
        """Return whether the executable for `version` is on disk right now."""
        return self.executable_path(version).exists()

    def sweep_stale_outputs(self, output_dir: Path) -> SweepReport:
        """Delete leftover generated map directories under `output_dir`.

        Only immediate child directories whose names match the generated map
        grammar are removed. A listing failure or a failed delete is logged and
        skipped; nothing is retried and nothing is raised.

        Args:
            output_dir: Custom maps directory.

        Returns:
            Deleted and failed paths.
        """
        _LOGGER.info("Deleting leftover generated maps...")
        if not output_dir.is_dir():
            return SweepReport()
        try:
            children = sorted(output_dir.iterdir())
        except OSError as exc:
            _LOGGER.warning(
                "%s: could not list %s: %s",
                MapGeneratorErrorCode.CLEANUP_PARTIAL_FAILURE.value,
                output_dir,
                exc,
            )
            return SweepReport()
        deleted: list[Path] = []
        failed: list[Path] = []
        for child in children:
            if not child.is_dir() or not GENERATED_MAP_PATTERN.fullmatch(child.name):
                continue
            try:
                shutil.rmtree(child)
            except OSError as exc:
                _LOGGER.warning(
                    "%s: could not delete generated map %s: %s",
                    MapGeneratorErrorCode.CLEANUP_PARTIAL_FAILURE.value,
                    child,
                    exc,
                )
                failed.append(child)
                continue
            deleted.append(child)
        return SweepReport(deleted=tuple(deleted), failed=tuple(failed))
