"""JSON file cache of raw calendar events."""

import json
import logging
from datetime import datetime
from pathlib import Path

from caltrack.ports.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)


class EventCache:
    """
    Serves raw events from a JSON file, filling it from a repository on a miss.

    Once written, the file is used as-is regardless of the requested window.
    """

    def __init__(self, path: Path | str, repository: CalendarRepository):
        self.path = Path(path).expanduser()
        self.repository = repository

    def read(self) -> list[dict]:
        data = json.loads(self.path.read_text())
        if isinstance(data, dict):
            return data.get("items", [])
        return data

    def write(self, items: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"items": items}, indent=2))

    def load_items(self, start: datetime, end: datetime) -> list[dict]:
        """Read cached events, or fetch and cache them if the cache is unusable."""
        try:
            return self.read()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read events from {self.path}, fetching them and saving first: {e}")

        items = self.repository.fetch_items(start, end)
        self.write(items)
        return items
