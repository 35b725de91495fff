"""Generator JVM invocation with a controlled environment."""

from __future__ import annotations

import os
import subprocess  # nosec B404 - list argv, shell=False
from collections.abc import Sequence
from pathlib import Path

TimeoutExpired = subprocess.TimeoutExpired

# Variables the JVM launcher needs to locate itself and a user home.
_PASSTHROUGH_VARS = ("PATH", "JAVA_HOME", "HOME", "SYSTEMROOT")


def minimal_env() -> dict[str, str]:
    """Return the passthrough variables that are set in this process."""
    return {name: os.environ[name] for name in _PASSTHROUGH_VARS if name in os.environ}


def run_subprocess(
    argv: Sequence[str], *, cwd: Path, timeout: float
) -> subprocess.CompletedProcess[str]:
    """Run the generator and capture its text output.

    The return code is left for the caller to inspect. On timeout the child
    is killed and `TimeoutExpired` propagates.

    Args:
        argv: Launcher and generator arguments.
        cwd: Directory the generator writes into.
        timeout: Upper bound in seconds.

    Returns:
        Finished process with stdout, stderr and returncode.
    """
    return subprocess.run(  # nosec B603 - list argv, shell=False
        list(argv),
        cwd=cwd,
        env=minimal_env(),
        capture_output=True,
        text=True,
        timeout=timeout,
        check=False,
    )
