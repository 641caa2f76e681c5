"""
Error taxonomy for archive relay operations.

Every foreseeable failure is one of four families: listing, extraction,
upload and routing. Each carries a message, the operation that failed, the
path or key involved, and an optional wrapped cause.
"""

import copy
from datetime import datetime
from typing import Any, Dict, List, Optional


class RelayError(Exception):
    """Base exception for archive relay errors."""

    code = "RELAY_ERROR"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.path = path
        self.cause = cause
        self.context: List[str] = []
        self.timestamp = datetime.now()
        if cause is not None:
            self.__cause__ = cause

    def with_context(self, ctx: str) -> "RelayError":
        """Return a copy of this error with an extra context entry."""
        clone = copy.copy(self)
        clone.context = [*self.context, ctx]
        return clone

    @property
    def full_message(self) -> str:
        parts = [self.message]
        if self.context:
            parts.append(f"Context: {' -> '.join(self.context)}")
        if self.cause is not None:
            parts.append(f"Caused by: {self.cause}")
        return "\n".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "operation": self.operation,
            "path": self.path,
            "context": list(self.context),
            "cause": str(self.cause) if self.cause is not None else None,
            "timestamp": self.timestamp.isoformat(),
        }


class ListingError(RelayError):
    """Source directory could not be listed."""

    code = "LISTING_ERROR"

    @classmethod
    def list_failed(cls, directory: str, cause: Optional[BaseException] = None) -> "ListingError":
        return cls(
            f"Failed to list directory: {directory}",
            operation="list",
            path=directory,
            cause=cause,
        )


class StatError(ListingError):
    """File metadata could not be read while probing archive age."""

    code = "STAT_ERROR"

    @classmethod
    def stat(cls, path: str, cause: Optional[BaseException] = None) -> "StatError":
        return cls(
            f"Failed to stat file: {path}", operation="stat", path=path, cause=cause
        )


class ExtractionError(RelayError):
    """Archive could not be read, or exceeded a resource bound."""

    code = "EXTRACTION_ERROR"

    def __init__(
        self,
        message: str,
        reason: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
        entry_name: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        super().__init__(message, operation="extract", path=path, cause=cause)
        self.reason = reason
        self.entry_name = entry_name
        self.limit = limit

    @classmethod
    def corrupt(cls, path: str, cause: Optional[BaseException] = None) -> "ExtractionError":
        return cls(
            f"Corrupt or invalid zip file: {path}",
            reason="corrupt",
            path=path,
            cause=cause,
        )

    @classmethod
    def too_many_entries(cls, path: str, limit: int) -> "ExtractionError":
        return cls(
            f"Zip file exceeds entry limit of {limit}: {path}",
            reason="entry_limit",
            path=path,
            limit=limit,
        )

    @classmethod
    def entry_too_large(cls, path: str, entry_name: str, limit: int) -> "ExtractionError":
        return cls(
            f"Entry {entry_name} exceeds size limit of {limit} bytes",
            reason="entry_size_limit",
            path=path,
            entry_name=entry_name,
            limit=limit,
        )

    @classmethod
    def too_large(cls, path: str, limit: int) -> "ExtractionError":
        return cls(
            f"Zip file exceeds size limit of {limit} bytes: {path}",
            reason="total_size_limit",
            path=path,
            limit=limit,
        )

    @classmethod
    def read_failed(
        cls, path: str, entry_name: Optional[str] = None, cause: Optional[BaseException] = None
    ) -> "ExtractionError":
        return cls(
            f"Failed to extract zip file: {path}",
            reason="read",
            path=path,
            cause=cause,
            entry_name=entry_name,
        )

    @classmethod
    def empty(cls, path: str) -> "ExtractionError":
        return cls(f"No files uploaded from zip file: {path}", reason="empty", path=path)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        if self.entry_name is not None:
            data["entry_name"] = self.entry_name
        if self.limit is not None:
            data["limit"] = self.limit
        return data


class UploadError(RelayError):
    """Object could not be delivered to the destination store."""

    code = "UPLOAD_ERROR"

    def __init__(
        self,
        message: str,
        bucket: str,
        key: Optional[str] = None,
        cause: Optional[BaseException] = None,
        operation: str = "put",
    ):
        super().__init__(message, operation=operation, path=key, cause=cause)
        self.bucket = bucket
        self.key = key

    @classmethod
    def put(cls, bucket: str, key: str, cause: Optional[BaseException] = None) -> "UploadError":
        return cls(f"Failed to upload to S3: {bucket}/{key}", bucket=bucket, key=key, cause=cause)

    @classmethod
    def partial(cls, bucket: str, failed_count: int, total_count: int) -> "UploadError":
        return cls(
            f"Partial upload failure: {failed_count}/{total_count} files failed",
            bucket=bucket,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["bucket"] = self.bucket
        data["key"] = self.key
        return data


class RoutingError(RelayError):
    """Processed archive could not be moved or deleted."""

    code = "ROUTING_ERROR"

    @classmethod
    def move(cls, path: str, cause: Optional[BaseException] = None) -> "RoutingError":
        return cls(f"Failed to move file: {path}", operation="move", path=path, cause=cause)

    @classmethod
    def delete(cls, path: str, cause: Optional[BaseException] = None) -> "RoutingError":
        return cls(f"Failed to delete file: {path}", operation="delete", path=path, cause=cause)


def root_cause(error: BaseException) -> BaseException:
    """Follow wrapped causes down to the innermost exception."""
    current = error
    seen = {id(current)}
    while True:
        nested = getattr(current, "cause", None)
        if nested is None:
            nested = current.__cause__
        if nested is None or id(nested) in seen:
            return current
        seen.add(id(nested))
        current = nested
