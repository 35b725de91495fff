"""Atomic file landing for downloaded generator executables."""

from __future__ import annotations

import os
import uuid
from collections.abc import Iterable
from pathlib import Path


def atomic_write_chunks(
    final_path: Path,
    chunks: Iterable[bytes],
    temp_prefix: str,
) -> int:
    """Write chunks to final_path atomically: temp -> fsync -> rename -> fsync dir.

    Temp file is created beside final_path so rename is atomic; a concurrent
    reader never sees a partial file at final_path. On failure, temp is removed
    and the exception propagates.

    Args:
        final_path: Destination path.
        chunks: Byte chunks, e.g. from a streamed HTTP body.
        temp_prefix: Prefix for temp filename, e.g. the destination name.

    Returns:
        Number of bytes written.
    """
    parent = final_path.parent
    parent.mkdir(parents=True, exist_ok=True)
    temp_path = parent / f".{temp_prefix}.{os.getpid()}.{uuid.uuid4().hex[:8]}.tmp"
    written = 0
    try:
        with temp_path.open("wb") as handle:
            for chunk in chunks:
                if chunk:
                    handle.write(chunk)
                    written += len(chunk)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, final_path)
        try:
            dir_fd = os.open(str(parent), os.O_RDONLY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError:
            pass  # e.g. Windows: directory fsync best-effort
    finally:
        if temp_path.exists():
            temp_path.unlink(missing_ok=True)
    return written
