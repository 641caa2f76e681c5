"""
Output name collision handling within one archive.
"""

import logging
import uuid
from typing import Set

logger = logging.getLogger(__name__)


def add_disambiguator(name: str, token: str) -> str:
    """Insert ``-token`` before the last extension, or append it."""
    dot = name.rfind(".")
    if dot == -1 or dot < name.rfind("/"):
        return f"{name}-{token}"
    return f"{name[:dot]}-{token}{name[dot:]}"


class NameDeduplicator:
    """Tracks output names used by one archive attempt."""

    def __init__(self) -> None:
        self._used: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)

    def resolve(self, candidate: str) -> str:
        """
        Return a name not yet used by this archive.

        Leading and trailing slashes are dropped first, as they are when the
        name is joined into a destination key, so ``/a.xml`` and ``a.xml``
        count as the same name.
        """
        candidate = candidate.strip("/") or candidate
        name = candidate
        while name in self._used:
            name = add_disambiguator(candidate, uuid.uuid4().hex[:8])

        if name != candidate:
            logger.debug(f"Renamed duplicate output {candidate} -> {name}")

        self._used.add(name)
        return name
