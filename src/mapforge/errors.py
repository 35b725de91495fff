"""Deterministic map generator error contracts."""

from __future__ import annotations

from enum import StrEnum


class MapGeneratorErrorCode(StrEnum):
    """Stable orchestration error codes."""

    INVALID_REQUEST_NAME = "invalid_request_name"
    UNSUPPORTED_VERSION = "unsupported_version"
    FETCH_FAILED = "fetch_failed"
    GENERATION_TIMEOUT = "generation_timeout"
    GENERATION_FAILED = "generation_failed"
    CLEANUP_PARTIAL_FAILURE = "cleanup_partial_failure"


class MapGeneratorError(RuntimeError):
    """Map generation failure with stable deterministic code."""

    def __init__(
        self,
        code: MapGeneratorErrorCode,
        message: str,
        *,
        data: dict[str, object] | None = None,
    ) -> None:
        """Create map generator failure.

        Args:
            code: Stable error code.
            message: Human-readable error message.
            data: Optional structured payload for diagnostics.
        """
        super().__init__(message)
        self.code = code
        self.data = data or {}
