"""Functional core - pure business logic with no I/O."""

from .events import Attendee, Event, ScheduledEvent, normalize_event, normalize_events
from .category import UNCATEGORIZED, Category, match_category
from .timeline import DayBoundary, EventCloses, EventOpens, Moment, build_timeline
from .totals import AggregationError, Totals, categorize_time, compute_totals
from .report import format_day_total, format_duration, render_report, week_start

__all__ = [
    # Events
    "Attendee",
    "Event",
    "ScheduledEvent",
    "normalize_event",
    "normalize_events",
    # Categories
    "UNCATEGORIZED",
    "Category",
    "match_category",
    # Timeline
    "DayBoundary",
    "EventCloses",
    "EventOpens",
    "Moment",
    "build_timeline",
    # Totals
    "AggregationError",
    "Totals",
    "categorize_time",
    "compute_totals",
    # Report
    "format_day_total",
    "format_duration",
    "render_report",
    "week_start",
]
