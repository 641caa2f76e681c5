"""
Classification and naming of extracted content.
"""

from .classifier import CONTENT_EXTENSION, ContentClassifier
from .naming import NameDeduplicator, add_disambiguator

__all__ = [
    "ContentClassifier",
    "CONTENT_EXTENSION",
    "NameDeduplicator",
    "add_disambiguator",
]
