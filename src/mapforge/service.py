"""Public entry points composing download and generation."""

from __future__ import annotations

import logging
import random
from concurrent.futures import Future
from pathlib import Path

from mapforge.cache import ArtifactCache, SweepReport
from mapforge.config import GENERATOR_DEFAULT_VERSION, MapGeneratorConfig
from mapforge.download import DownloadCoordinator, Downloader, HttpDownloader
from mapforge.errors import MapGeneratorError, MapGeneratorErrorCode
from mapforge.generation import GenerationExecutor
from mapforge.naming import (
    SEED_MAX,
    SEED_MIN,
    decode,
    is_generated_name,
    validate_version,
)
from mapforge.tasks import TaskRunner, chain, failed

_LOGGER = logging.getLogger(__name__)

_FALLBACK_MAPS_SUB_DIRECTORY = "maps"


class MapGeneratorService:
    """Generate maps by `(version, seed)`, downloading generators on demand."""

    def __init__(
        self,
        *,
        cache: ArtifactCache,
        coordinator: DownloadCoordinator,
        executor: GenerationExecutor,
        custom_maps_dir: Path | None = None,
        default_version: str = GENERATOR_DEFAULT_VERSION,
        seed_generator: random.Random | None = None,
    ) -> None:
        """Store collaborators and sweep leftover generated maps.

        The sweep runs synchronously, before any request is accepted, and only
        when a custom maps directory is configured.

        Args:
            cache: Generator executable cache.
            coordinator: Download coordinator over the same cache.
            executor: Generation executor.
            custom_maps_dir: Directory holding generated maps, if any.
            default_version: Version used by `generate_map()`.
            seed_generator: Seed source, created once and reused.
        """
        self._cache = cache
        self._coordinator = coordinator
        self._executor = executor
        self._custom_maps_dir = custom_maps_dir
        self._default_version = default_version
        self._seed_generator = seed_generator or random.Random()
        self._sweep_report = SweepReport()
        if custom_maps_dir is not None:
            self._sweep_report = cache.sweep_stale_outputs(custom_maps_dir)

    @classmethod
    def from_config(
        cls,
        config: MapGeneratorConfig,
        *,
        task_runner: TaskRunner,
        downloader: Downloader | None = None,
        seed_generator: random.Random | None = None,
    ) -> MapGeneratorService:
        """Build a service and its collaborators from configuration.

        Args:
            config: Loaded configuration.
            task_runner: Shared pool for downloads and generation.
            downloader: Transport override; HTTP by default.
            seed_generator: Seed source override.

        Returns:
            Ready service (start-up sweep already done).
        """
        cache = ArtifactCache(config.generator_executable_dir)
        effective_downloader = downloader or HttpDownloader(
            url_template=config.download_url_template,
            timeout_seconds=config.download_timeout_seconds,
        )
        output_dir = config.custom_maps_dir or (
            config.data_dir / _FALLBACK_MAPS_SUB_DIRECTORY
        )
        return cls(
            cache=cache,
            coordinator=DownloadCoordinator(
                cache=cache,
                downloader=effective_downloader,
                task_runner=task_runner,
            ),
            executor=GenerationExecutor(
                task_runner=task_runner,
                output_dir=output_dir,
                java_path=config.java_path,
                timeout_seconds=config.generation_timeout_seconds,
            ),
            custom_maps_dir=config.custom_maps_dir,
            default_version=config.default_version,
            seed_generator=seed_generator,
        )

    @property
    def generator_executable_dir(self) -> Path:
        """Cache root holding generator executables."""
        return self._cache.root

    @property
    def custom_maps_dir(self) -> Path | None:
        """Configured custom maps directory."""
        return self._custom_maps_dir

    @property
    def sweep_report(self) -> SweepReport:
        """Outcome of the start-up sweep."""
        return self._sweep_report

    def generate_map(self, version: str | None = None) -> Future[str]:
        """Generate a map with a fresh random seed.

        Args:
            version: Generator version; the default version when omitted.

        Returns:
            Future yielding the generated map name.
        """
        seed = self._seed_generator.randint(SEED_MIN, SEED_MAX)
        effective = self._default_version if version is None else version
        return self.generate_map_for(effective, seed)

    def generate_map_from_name(self, map_name: str) -> Future[str]:
        """Regenerate the map a generated map name encodes.

        Args:
            map_name: Generated map name.

        Returns:
            Future yielding the generated map name.

        Raises:
            MapGeneratorError: Synchronously, with `invalid_request_name`,
                when `map_name` is not a generated map name.
        """
        request = decode(map_name)
        return self.generate_map_for(request.version, request.seed)

    def generate_map_for(self, version: str, seed: int) -> Future[str]:
        """Ensure the generator is available, then generate one map.

        Every failure, including an unsupported version, is delivered through
        the returned future.

        Args:
            version: Generator version.
            seed: Generation seed.

        Returns:
            Future yielding the generated map name.
        """
        if not validate_version(version):
            _LOGGER.error("Unsupported generator version: %s", version)
            return failed(
                MapGeneratorError(
                    MapGeneratorErrorCode.UNSUPPORTED_VERSION,
                    f"Unsupported generator version: {version}",
                    data={"version": version},
                )
            )
        return chain(
            self._coordinator.ensure_available(version),
            lambda executable: self._executor.run(version, seed, executable),
        )

    def is_generated_map(self, map_name: str) -> bool:
        """Return whether `map_name` is a generated map name."""
        return is_generated_name(map_name)
