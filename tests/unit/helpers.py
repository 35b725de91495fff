"""Test-only collaborators for map generator orchestration tests."""

from __future__ import annotations

import stat
import sys
import threading
from collections.abc import Callable
from concurrent.futures import Future
from pathlib import Path
from typing import Any


class RecordingDownloader:
    """Downloader fake that records calls and lands a stub jar.

    When `gate` is set, every fetch blocks until the gate is opened so tests
    can pile up concurrent callers while a fetch is in flight.
    """

    def __init__(
        self,
        *,
        error: Exception | None = None,
        gate: threading.Event | None = None,
        land_file: bool = True,
    ) -> None:
        self.calls: list[str] = []
        self.started = threading.Event()
        self._error = error
        self._gate = gate
        self._land_file = land_file
        self._lock = threading.Lock()

    def fetch(self, version: str, destination: Path) -> None:
        with self._lock:
            self.calls.append(version)
        self.started.set()
        if self._gate is not None:
            assert self._gate.wait(timeout=5), "test gate was never opened"
        if self._error is not None:
            raise self._error
        if self._land_file:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(b"PK stub jar")


class InlineTaskRunner:
    """TaskRunner that runs work immediately on the calling thread."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:  # noqa: BLE001
            future.set_exception(exc)
        return future


def seed_cached_jar(cache_root: Path, version: str) -> Path:
    """Place a stub generator jar for `version` in the cache root."""
    cache_root.mkdir(parents=True, exist_ok=True)
    jar = cache_root / f"MapGenerator_{version}.jar"
    jar.write_bytes(b"PK stub jar")
    return jar


def write_fake_java(path: Path, *, exit_code: int = 0, sleep_s: float = 0.0) -> Path:
    """Write an executable stand-in for `java -jar` that mimics the generator.

    argv: -jar <jar> <output_dir> <seed> <version> <map_name>. On exit code 0
    it creates `<output_dir>/<map_name>/`.
    """
    path.write_text(
        f"""#!{sys.executable}
import sys
import time
from pathlib import Path

_, flag, jar, out_dir, seed, version, name = sys.argv
time.sleep({sleep_s!r})
if {exit_code!r} != 0:
    sys.stderr.write("generator crashed")
    sys.exit({exit_code!r})
(Path(out_dir) / name).mkdir(parents=True, exist_ok=True)
print(f"generated {{name}}")
""",
        encoding="utf-8",
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
