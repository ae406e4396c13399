"""Calendar repository interface."""

from datetime import datetime
from typing import Protocol


class CalendarRepository(Protocol):
    """Interface for reading and correcting events in a calendar backend."""

    def fetch_items(self, start: datetime, end: datetime) -> list[dict]:
        """Fetch raw event resources overlapping [start, end)."""
        ...

    def update_summary(self, event_id: str, summary: str) -> None:
        """Replace the summary of one event."""
        ...
