"""
Content-based filtering and output naming for extracted files.
"""

import logging
import re
from typing import Optional, Pattern

from ..models.processing_models import ClassifiedItem, ExtractedItem

logger = logging.getLogger(__name__)

CONTENT_EXTENSION = ".xml"


class ContentClassifier:
    """
    Decides whether an extracted file is kept and what it is called.

    The filter pattern drops files whose content matches it. The filename
    pattern's first capture group, when it matches, becomes the output name
    with ``CONTENT_EXTENSION`` appended; otherwise the entry keeps its
    original name.
    """

    def __init__(
        self,
        filename_pattern: Optional[str] = None,
        filter_pattern: Optional[str] = None,
    ):
        self.filename_regex: Optional[Pattern[str]] = (
            re.compile(filename_pattern) if filename_pattern else None
        )
        self.filter_regex: Optional[Pattern[str]] = (
            re.compile(filter_pattern) if filter_pattern else None
        )

    def should_filter(self, content: str) -> bool:
        if self.filter_regex is None:
            return False
        return self.filter_regex.search(content) is not None

    def extract_filename(self, content: str, fallback_name: str) -> str:
        if self.filename_regex is None:
            return fallback_name

        match = self.filename_regex.search(content)
        if match and match.groups() and match.group(1):
            return f"{match.group(1)}{CONTENT_EXTENSION}"

        return fallback_name

    def classify(self, item: ExtractedItem) -> ClassifiedItem:
        content = item.content.decode("utf-8", errors="replace")

        if self.should_filter(content):
            logger.debug(f"Filtered {item.name} by content")
            return ClassifiedItem(item=item, keep=False, name=item.name)

        return ClassifiedItem(
            item=item, keep=True, name=self.extract_filename(content, item.name)
        )
