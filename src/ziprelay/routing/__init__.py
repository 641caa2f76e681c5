"""
Filesystem collaborators for archive discovery and routing.
"""

from .file_router import FileRouter, file_age_ms, is_valid_archive_name, list_archives

__all__ = ["FileRouter", "file_age_ms", "is_valid_archive_name", "list_archives"]
