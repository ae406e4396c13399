"""Shared workflow layer between the CLI and the adapters."""

import logging
from datetime import datetime
from pathlib import Path

from .adapters.corrections import apply_corrections, load_corrections
from .adapters.event_cache import EventCache
from .adapters.google_calendar import GoogleCalendarAdapter
from .config import Config, load_categories
from .core.category import Category
from .core.events import Event
from .ports.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)


def get_calendar(config: Config, source: str | None = None) -> GoogleCalendarAdapter:
    """Build the calendar adapter from config."""
    return GoogleCalendarAdapter(
        token_folder=config.token_folder,
        source=source or config.source,
        client_secret_file=config.client_secret_file,
    )


def fetch_events(
    repository: CalendarRepository,
    start: datetime,
    end: datetime,
    cache_file: str = "",
) -> list[Event]:
    """Fetch events in [start, end), through the JSON cache when one is given."""
    if cache_file:
        items = EventCache(cache_file, repository).load_items(start, end)
    else:
        items = repository.fetch_items(start, end)
    return [Event.from_api(item) for item in items]


def push_corrections(repository: CalendarRepository, corrections_file: str) -> int:
    """Apply summary corrections from file, if any. Returns how many were applied."""
    if not corrections_file:
        return 0
    return apply_corrections(repository, load_corrections(corrections_file))


def read_categories(path: str) -> list[Category]:
    """Load categories; a missing file means events cannot be categorized."""
    try:
        return load_categories(path)
    except FileNotFoundError as e:
        logger.warning(f"Could not read categories file {Path(path)}, cannot categorize events: {e}")
        return []
