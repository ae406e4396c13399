"""Time totals per day and per category - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo

from .category import UNCATEGORIZED, Category, match_category
from .events import Event, ScheduledEvent, normalize_events
from .timeline import EventCloses, EventOpens, Moment, build_timeline


class AggregationError(RuntimeError):
    """Raised when the sweep bookkeeping breaks an invariant."""


@dataclass
class Totals:
    """Result of one aggregation run."""

    day_totals: dict[date, timedelta] = field(default_factory=dict)
    category_totals: dict[str, timedelta] = field(default_factory=dict)
    unrecognized: list[Event] = field(default_factory=list)
    category_details: dict[str, list[str]] = field(default_factory=dict)
    diagnostics: list[str] = field(default_factory=list)

    @property
    def total(self) -> timedelta:
        return sum(self.day_totals.values(), timedelta())


class Span:
    """Events currently in progress, and where the current interval began."""

    def __init__(self, categories: list[Category], tz: tzinfo):
        self.categories = categories
        self.tz = tz
        self.start: datetime | None = None
        self.events: dict[ScheduledEvent, str] = {}

    def checkpoint(self, totals: Totals, end: datetime) -> None:
        """Account for time elapsed since the previous checkpoint."""
        if self.start is not None and self.events:
            time_spent = end - self.start
            # Any remainder of the division is dropped.
            time_per_event = time_spent // len(self.events)
            day = self.start.astimezone(self.tz).date()
            totals.day_totals[day] = totals.day_totals.get(day, timedelta()) + time_spent
            for category_name in self.events.values():
                totals.category_totals[category_name] = (
                    totals.category_totals.get(category_name, timedelta()) + time_per_event
                )
        self.start = end

    def event_end(self, event: ScheduledEvent) -> None:
        if event not in self.events:
            raise AggregationError(f"Event {event.summary!r} closed while not open")
        del self.events[event]

    def event_start(self, event: ScheduledEvent) -> bool:
        """Open an event. Returns False if no category recognized it."""
        if event in self.events:
            raise AggregationError(f"Event {event.summary!r} opened twice")
        category = match_category(event.summary, self.categories)
        self.events[event] = category.name if category else UNCATEGORIZED
        return category is not None


def categorize_time(moments: list[Moment], categories: list[Category], tz: tzinfo) -> Totals:
    """
    Sweep the timeline once, splitting elapsed time between days and categories.

    Concurrent events share time equally; the day total counts it once.
    """
    totals = Totals()
    span = Span(categories, tz)

    for moment in moments:
        span.checkpoint(totals, moment.instant)
        opens = [m for m in moment.markers if isinstance(m, EventOpens)]
        closes = [m for m in moment.markers if isinstance(m, EventCloses)]
        # Opens go first so that zero-length events balance out.
        for marker in opens:
            recognized = span.event_start(marker.event)
            if not recognized:
                totals.unrecognized.append(marker.event.event)
            totals.category_details.setdefault(span.events[marker.event], []).append(
                marker.event.summary
            )
        for marker in closes:
            span.event_end(marker.event)
        # DayBoundary markers only exist to force a checkpoint at midnight.

    if span.events:
        still_open = ", ".join(repr(e.summary) for e in span.events)
        raise AggregationError(f"Events still open after the last moment: {still_open}")
    return totals


def compute_totals(events: list[Event], categories: list[Category], tz: tzinfo) -> Totals:
    """
    Compute time spent per day and per category, plus unrecognized events.

    Pure function - no I/O.
    """
    diagnostics: list[str] = []
    scheduled = normalize_events(events, diagnostics)
    totals = categorize_time(build_timeline(scheduled, tz), categories, tz)
    totals.diagnostics = diagnostics
    return totals
