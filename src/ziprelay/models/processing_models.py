"""
Data models flowing through archive processing.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import RelayError, UploadError


@dataclass(frozen=True)
class ExtractedItem:
    """One file read out of an archive."""

    name: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ClassifiedItem:
    """Extracted item with a keep/filter decision and candidate output name."""

    item: ExtractedItem
    keep: bool
    name: str


@dataclass(frozen=True)
class OutputItem:
    """Kept item whose name is unique within its archive attempt."""

    name: str
    content: bytes


@dataclass(frozen=True)
class Batch:
    """Group of output items sharing one destination prefix."""

    prefix: str
    items: Tuple[OutputItem, ...]

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class UploadSuccess:
    """Delivered object and the store-assigned ETag."""

    key: str
    etag: Optional[str]


class UploadStatus(Enum):
    """Outcome of uploading one batch."""

    FULL_SUCCESS = "full_success"
    PARTIAL_SUCCESS = "partial_success"


@dataclass
class BatchUploadResult:
    """Per-item outcomes for one batch."""

    prefix: str
    successful: List[UploadSuccess] = field(default_factory=list)
    failed: List[UploadError] = field(default_factory=list)

    @property
    def status(self) -> UploadStatus:
        if self.failed:
            return UploadStatus.PARTIAL_SUCCESS
        return UploadStatus.FULL_SUCCESS

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)


@dataclass(frozen=True)
class ArchiveListing:
    """Eligible archives found in the source directory."""

    files: List[str]
    oldest_age_ms: float = 0.0
    skipped_too_new: int = 0


@dataclass
class ArchiveResult:
    """Terminal disposition of one archive."""

    archive_path: Path
    success: bool
    files_extracted: int = 0
    files_uploaded: int = 0
    files_filtered: int = 0
    files_failed: int = 0
    error: Optional[RelayError] = None
    routing_error: Optional[RelayError] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "zip_path": str(self.archive_path),
            "files_extracted": self.files_extracted,
            "files_uploaded": self.files_uploaded,
            "files_filtered": self.files_filtered,
        }
        if not self.success:
            data["files_failed"] = self.files_failed
            data["error"] = self.error.to_dict() if self.error else None
        if self.routing_error is not None:
            data["routing_error"] = self.routing_error.to_dict()
        return data


@dataclass
class InvocationResult:
    """Aggregate response for one invocation, results kept in processing order."""

    results: List[ArchiveResult] = field(default_factory=list)
    stopped_early: bool = False
    archives_skipped: int = 0
    oldest_age_ms: float = 0.0

    def add(self, result: ArchiveResult) -> None:
        self.results.append(result)

    @property
    def successes(self) -> List[ArchiveResult]:
        return [r for r in self.results if r.success]

    @property
    def failures(self) -> List[ArchiveResult]:
        return [r for r in self.results if not r.success]

    @property
    def zips_processed(self) -> int:
        return len(self.successes)

    @property
    def zips_failed(self) -> int:
        return len(self.failures)

    @property
    def total_files_uploaded(self) -> int:
        return sum(r.files_uploaded for r in self.results)

    @property
    def total_files_failed(self) -> int:
        return sum(r.files_failed for r in self.results)

    @property
    def total_files_filtered(self) -> int:
        return sum(r.files_filtered for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zips_processed": self.zips_processed,
            "zips_failed": self.zips_failed,
            "total_files_uploaded": self.total_files_uploaded,
            "total_files_failed": self.total_files_failed,
            "total_files_filtered": self.total_files_filtered,
            "successes": [r.to_dict() for r in self.successes],
            "failures": [r.to_dict() for r in self.failures],
            "stopped_early": self.stopped_early,
            "archives_skipped": self.archives_skipped,
            "oldest_age_ms": self.oldest_age_ms,
        }
