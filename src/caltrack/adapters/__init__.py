"""Adapters - I/O implementations of ports."""

from .google_calendar import GoogleCalendarAdapter, CalendarError
from .event_cache import EventCache
from .corrections import Correction, apply_corrections, load_corrections, save_unrecognized

__all__ = [
    "GoogleCalendarAdapter",
    "CalendarError",
    "EventCache",
    "Correction",
    "apply_corrections",
    "load_corrections",
    "save_unrecognized",
]
