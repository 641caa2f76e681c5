"""
Archive processing engine.

Delivery is at-least-once: uploads are never rolled back, so an archive that
fails after some of its files were delivered leaves those objects in place.
Reprocessing it (for example from the failed directory) uploads them again
under a new batch prefix, producing duplicate objects with different keys.
"""

from .archive_processor import ArchiveProcessor, ArchiveState, ArchiveTask
from .orchestrator import InvocationBudget, InvocationOrchestrator

__all__ = [
    "ArchiveProcessor",
    "ArchiveState",
    "ArchiveTask",
    "InvocationBudget",
    "InvocationOrchestrator",
]
