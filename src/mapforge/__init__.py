"""Versioned map generator orchestration public surface."""

from mapforge.cache import ArtifactCache, ArtifactCacheEntry, SweepReport
from mapforge.download import (
    DownloadCoordinator,
    Downloader,
    DownloadState,
    HttpDownloader,
)
from mapforge.errors import MapGeneratorError, MapGeneratorErrorCode
from mapforge.generation import GenerationExecutor
from mapforge.naming import (
    GenerationRequest,
    decode,
    encode,
    is_generated_name,
    validate_version,
)
from mapforge.service import MapGeneratorService
from mapforge.tasks import TaskRunner, ThreadPoolTaskRunner

__all__ = [
    "ArtifactCache",
    "ArtifactCacheEntry",
    "DownloadCoordinator",
    "DownloadState",
    "Downloader",
    "GenerationExecutor",
    "GenerationRequest",
    "HttpDownloader",
    "MapGeneratorError",
    "MapGeneratorErrorCode",
    "MapGeneratorService",
    "SweepReport",
    "TaskRunner",
    "ThreadPoolTaskRunner",
    "decode",
    "encode",
    "is_generated_name",
    "validate_version",
]
