"""Exactly-once generator downloads keyed by version."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from enum import StrEnum
from functools import partial
from pathlib import Path
from threading import Lock
from typing import Protocol

import requests
from filelock import FileLock

from mapforge.atomic_write import atomic_write_chunks
from mapforge.cache import ArtifactCache
from mapforge.errors import MapGeneratorError, MapGeneratorErrorCode
from mapforge.naming import executable_filename, validate_version
from mapforge.tasks import TaskRunner, completed, failed, follow

_LOGGER = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_URL_TEMPLATE = (
    "https://github.com/FAForever/Neroxis-Map-Generator/releases/download/"
    "{version}/MapGenerator_{version}.jar"
)


class Downloader(Protocol):
    """Transport that lands one generator executable on disk."""

    def fetch(self, version: str, destination: Path) -> None:
        """Download `version` to `destination`, raising on any failure.

        Args:
            version: Validated generator version.
            destination: Final executable path; must only appear when complete.
        """


class DownloadState(StrEnum):
    """Per-version download lifecycle, held in memory only."""

    UNCHECKED = "unchecked"
    CHECKING = "checking"
    CACHED_PRESENT = "cached_present"
    FETCHING = "fetching"
    FETCHED = "fetched"
    FETCH_FAILED = "fetch_failed"


class HttpDownloader:
    """Fetch generator releases over HTTP with atomic landing."""

    def __init__(
        self,
        *,
        url_template: str = DEFAULT_DOWNLOAD_URL_TEMPLATE,
        timeout_seconds: float = 30.0,
        chunk_size: int = 64 * 1024,
    ) -> None:
        """Store transport settings.

        Args:
            url_template: Release URL with a `{version}` placeholder.
            timeout_seconds: Connect/read timeout per request.
            chunk_size: Streaming chunk size in bytes.
        """
        self._url_template = url_template
        self._timeout_seconds = timeout_seconds
        self._chunk_size = chunk_size

    def url_for(self, version: str) -> str:
        """Return release URL for `version`."""
        return self._url_template.format(version=version)

    def fetch(self, version: str, destination: Path) -> None:
        """Stream release body to a temp file, then rename into place.

        A file lock beside the destination serializes other processes
        downloading the same version.

        Args:
            version: Generator version.
            destination: Final executable path.

        Raises:
            requests.RequestException: On transport or HTTP status failure.
            OSError: When the file cannot be written.
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        lock_path = destination.with_name(f"{destination.name}.lock")
        with FileLock(str(lock_path)):
            if destination.exists():
                return
            url = self.url_for(version)
            _LOGGER.debug("download.fetch version=%s url=%s", version, url)
            with requests.get(url, stream=True, timeout=self._timeout_seconds) as resp:
                resp.raise_for_status()
                written = atomic_write_chunks(
                    destination,
                    resp.iter_content(chunk_size=self._chunk_size),
                    temp_prefix=executable_filename(version),
                )
            _LOGGER.debug("download.done version=%s bytes=%d", version, written)


class DownloadCoordinator:
    """Ensure generator executables are present, fetching each at most once."""

    def __init__(
        self,
        *,
        cache: ArtifactCache,
        downloader: Downloader,
        task_runner: TaskRunner,
    ) -> None:
        """Store collaborators.

        Args:
            cache: Executable cache to check and land into.
            downloader: Transport used on cache miss.
            task_runner: Pool the fetch is submitted to.
        """
        self._cache = cache
        self._downloader = downloader
        self._task_runner = task_runner
        self._lock = Lock()
        self._states: dict[str, DownloadState] = {}
        self._in_flight: dict[str, Future[Path]] = {}

    def state(self, version: str) -> DownloadState:
        """Return current download state for `version`."""
        with self._lock:
            return self._states.get(version, DownloadState.UNCHECKED)

    def ensure_available(self, version: str) -> Future[Path]:
        """Resolve once the executable for `version` is on disk.

        Concurrent callers for a version that is being fetched each get a
        future following the one in-flight fetch; only the first cache miss
        issues a fetch, and a caller cancelling its future detaches only itself.

        Args:
            version: Requested generator version.

        Returns:
            Future yielding the executable path, or failing with
            `MapGeneratorError` (`unsupported_version` or `fetch_failed`).
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

        with self._lock:
            pending = self._in_flight.get(version)
            if pending is not None:
                return follow(pending)
            self._states[version] = DownloadState.CHECKING
            entry = self._cache.lookup(version)
            if entry.present:
                self._states[version] = DownloadState.CACHED_PRESENT
                _LOGGER.info("Found MapGenerator version: %s", version)
                return completed(entry.local_path)
            self._states[version] = DownloadState.FETCHING
            result: Future[Path] = Future()
            self._in_flight[version] = result

        _LOGGER.info("Downloading MapGenerator version: %s", version)
        try:
            fetch = self._task_runner.submit(
                self._downloader.fetch, version, entry.local_path
            )
        except RuntimeError as exc:
            self._settle(version, entry.local_path, result, exc)
            return follow(result)
        fetch.add_done_callback(
            partial(self._on_fetch_done, version, entry.local_path, result)
        )
        return follow(result)

    def _on_fetch_done(
        self,
        version: str,
        destination: Path,
        result: Future[Path],
        fetch: Future[None],
    ) -> None:
        if fetch.cancelled():
            exc: BaseException | None = RuntimeError("download cancelled")
        else:
            exc = fetch.exception()
        if exc is None and not self._cache.exists(version):
            exc = FileNotFoundError(str(destination))
        self._settle(version, destination, result, exc)

    def _settle(
        self,
        version: str,
        destination: Path,
        result: Future[Path],
        exc: BaseException | None,
    ) -> None:
        """Record final state, release the in-flight slot, then resolve waiters."""
        with self._lock:
            self._in_flight.pop(version, None)
            self._states[version] = (
                DownloadState.FETCH_FAILED if exc is not None else DownloadState.FETCHED
            )
        if exc is None:
            result.set_result(destination)
            return
        _LOGGER.error("Download of MapGenerator version %s failed: %s", version, exc)
        error = MapGeneratorError(
            MapGeneratorErrorCode.FETCH_FAILED,
            f"Could not download MapGenerator version {version}",
            data={"version": version, "reason": str(exc)},
        )
        error.__cause__ = exc
        result.set_exception(error)
