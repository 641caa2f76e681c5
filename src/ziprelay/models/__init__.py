"""
Data, configuration and error models.
"""

from .config_models import (
    DestinationConfig,
    LoggingConfig,
    ProcessingConfig,
    RelayConfig,
    SourceConfig,
)
from .errors import (
    ExtractionError,
    ListingError,
    RelayError,
    RoutingError,
    StatError,
    UploadError,
    root_cause,
)
from .processing_models import (
    ArchiveListing,
    ArchiveResult,
    Batch,
    BatchUploadResult,
    ClassifiedItem,
    ExtractedItem,
    InvocationResult,
    OutputItem,
    UploadStatus,
    UploadSuccess,
)

__all__ = [
    # Configuration
    "RelayConfig",
    "SourceConfig",
    "DestinationConfig",
    "ProcessingConfig",
    "LoggingConfig",
    # Errors
    "RelayError",
    "ListingError",
    "StatError",
    "ExtractionError",
    "UploadError",
    "RoutingError",
    "root_cause",
    # Processing data
    "ExtractedItem",
    "ClassifiedItem",
    "OutputItem",
    "Batch",
    "UploadSuccess",
    "UploadStatus",
    "BatchUploadResult",
    "ArchiveListing",
    "ArchiveResult",
    "InvocationResult",
]
