"""Timeline of event boundaries and local midnights."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo

from .events import ScheduledEvent


@dataclass(frozen=True)
class EventOpens:
    event: ScheduledEvent


@dataclass(frozen=True)
class EventCloses:
    event: ScheduledEvent


@dataclass(frozen=True)
class DayBoundary:
    date: date


Marker = EventOpens | EventCloses | DayBoundary


@dataclass
class Moment:
    """An instant on the timeline and everything happening at it."""

    instant: datetime
    markers: list[Marker] = field(default_factory=list)


def local_midnight(day: date, tz: tzinfo) -> datetime:
    """Midnight at the start of the given day in the given zone."""
    return datetime.combine(day, time(0, 0), tzinfo=tz)


class Timeline:
    """Collects markers keyed by absolute instant."""

    def __init__(self, tz: tzinfo):
        self.tz = tz
        self._moments: dict[datetime, list[Marker]] = {}

    def _add(self, instant: datetime, marker: Marker) -> None:
        # Keyed in UTC so that equal instants with different offsets merge.
        key = instant.astimezone(timezone.utc)
        self._moments.setdefault(key, []).append(marker)

    def add_event(self, event: ScheduledEvent) -> None:
        self._add(event.start, EventOpens(event))
        self._add(event.end, EventCloses(event))
        for boundary in (event.start, event.end):
            day = boundary.astimezone(self.tz).date()
            self.add_midnight(day)
            self.add_midnight(day + timedelta(days=1))

    def add_midnight(self, day: date) -> None:
        self._add(local_midnight(day, self.tz), DayBoundary(day))

    def moments(self) -> list[Moment]:
        """Moments in strictly increasing order of instant."""
        return [Moment(instant, list(self._moments[instant])) for instant in sorted(self._moments)]


def build_timeline(events: list[ScheduledEvent], tz: tzinfo) -> list[Moment]:
    """
    Lay normalized events on a time axis.

    Every day touched by an event start or end gets its own midnight moments
    on both sides, so that time can be split between calendar days.
    """
    timeline = Timeline(tz)
    for event in events:
        timeline.add_event(event)
    return timeline.moments()
