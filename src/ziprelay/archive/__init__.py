"""
Archive reading.
"""

from .extractor import ArchiveExtractor, ExtractionLimits, extract_archive

__all__ = ["ArchiveExtractor", "ExtractionLimits", "extract_archive"]
