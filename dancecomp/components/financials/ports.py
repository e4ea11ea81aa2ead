"""
Financial aggregation port definitions.
"""

from __future__ import annotations

from typing import Protocol

from dancecomp.domain.entities import Entry


class EntryLoaderPort(Protocol):
    """Loads a full entry when a listing omitted its participants."""

    def load_entry(self, entry_id: str) -> Entry:
        """Load an entry with participants. Raises EntityNotFoundError."""
        ...
