"""Supervised execution of the external map generator."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from pathlib import Path

from mapforge.errors import MapGeneratorError, MapGeneratorErrorCode
from mapforge.naming import encode
from mapforge.run_cmd import TimeoutExpired, run_subprocess
from mapforge.tasks import TaskRunner

_LOGGER = logging.getLogger(__name__)

GENERATION_TIMEOUT_SECONDS = 60.0
_STDERR_TAIL_CHARS = 2000


def _tail(text: str | bytes | None) -> str:
    if text is None:
        return ""
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    return text[-_STDERR_TAIL_CHARS:]


class GenerationExecutor:
    """Run one generator invocation per `(version, seed)` on the shared pool."""

    def __init__(
        self,
        *,
        task_runner: TaskRunner,
        output_dir: Path,
        java_path: str = "java",
        timeout_seconds: float = GENERATION_TIMEOUT_SECONDS,
    ) -> None:
        """Store execution dependencies.

        Args:
            task_runner: Pool generation jobs are submitted to.
            output_dir: Directory the generator writes maps into.
            java_path: JVM launcher used to run the generator jar.
            timeout_seconds: Upper bound for one generation run.
        """
        self._task_runner = task_runner
        self._output_dir = output_dir
        self._java_path = java_path
        self._timeout_seconds = timeout_seconds

    @property
    def output_dir(self) -> Path:
        """Directory generated maps are written to."""
        return self._output_dir

    def build_command(self, version: str, seed: int, executable: Path) -> list[str]:
        """Return generator argv for one request.

        Args:
            version: Generator version.
            seed: Generation seed.
            executable: Generator jar path.

        Returns:
            Command line passed to the subprocess.
        """
        return [
            self._java_path,
            "-jar",
            str(executable),
            str(self._output_dir),
            str(seed),
            version,
            encode(version, seed),
        ]

    def run(self, version: str, seed: int, executable: Path) -> Future[str]:
        """Submit one generation job.

        Args:
            version: Generator version.
            seed: Generation seed.
            executable: Verified generator jar path.

        Returns:
            Future yielding the generated map name, or failing with
            `MapGeneratorError` (`generation_timeout` or `generation_failed`).
        """
        return self._task_runner.submit(self._generate, version, seed, executable)

    def _generate(self, version: str, seed: int, executable: Path) -> str:
        """Run the generator once; no retry."""
        map_name = encode(version, seed)
        argv = self.build_command(version, seed, executable)
        data: dict[str, object] = {"version": version, "seed": seed, "map": map_name}
        _LOGGER.info("Generating map %s", map_name)
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
            result = run_subprocess(
                argv, cwd=self._output_dir, timeout=self._timeout_seconds
            )
        except TimeoutExpired as exc:
            raise MapGeneratorError(
                MapGeneratorErrorCode.GENERATION_TIMEOUT,
                f"Map generation of {map_name} timed out after "
                f"{self._timeout_seconds}s",
                data={**data, "stderr": _tail(exc.stderr)},
            ) from exc
        except OSError as exc:
            raise MapGeneratorError(
                MapGeneratorErrorCode.GENERATION_FAILED,
                f"Could not run map generator for {map_name}: {exc}",
                data=data,
            ) from exc
        if result.returncode != 0:
            raise MapGeneratorError(
                MapGeneratorErrorCode.GENERATION_FAILED,
                f"Map generator exited with code {result.returncode} for {map_name}",
                data={
                    **data,
                    "returncode": result.returncode,
                    "stderr": _tail(result.stderr),
                },
            )
        _LOGGER.debug("generation.done map=%s", map_name)
        return map_name
