"""Calendar event model and normalization - no I/O dependencies."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)

IGNORED_EVENT_TYPES = ("outOfOffice", "workingLocation")

# Speedy meetings usually last until the full slot anyway.
STRETCHED_DURATIONS = {
    timedelta(minutes=50): timedelta(minutes=60),
    timedelta(minutes=40): timedelta(minutes=45),
    timedelta(minutes=25): timedelta(minutes=30),
}


@dataclass(frozen=True)
class Attendee:
    """An event attendee as seen by the calendar owner."""

    email: str = ""
    is_self: bool = False
    response_status: str = ""


@dataclass(frozen=True)
class Event:
    """A raw calendar event, as returned by the calendar API."""

    id: str
    summary: str
    start: str
    end: str
    event_type: str = "default"
    organizer_self: bool = False
    organizer_name: str = ""
    organizer_email: str = ""
    creator_self: bool = False
    attendees: tuple[Attendee, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, item: dict) -> "Event":
        """Build an Event from a Google Calendar API event resource."""
        organizer = item.get("organizer") or {}
        creator = item.get("creator") or {}
        return cls(
            id=item.get("id") or "",
            summary=item.get("summary") or "",
            start=(item.get("start") or {}).get("dateTime") or "",
            end=(item.get("end") or {}).get("dateTime") or "",
            event_type=item.get("eventType") or "default",
            organizer_self=bool(organizer.get("self", False)),
            organizer_name=organizer.get("displayName") or "",
            organizer_email=organizer.get("email") or "",
            creator_self=bool(creator.get("self", False)),
            attendees=tuple(
                Attendee(
                    email=a.get("email") or "",
                    is_self=bool(a.get("self", False)),
                    response_status=a.get("responseStatus") or "",
                )
                for a in item.get("attendees") or []
            ),
        )

    @property
    def organizer(self) -> str:
        """Organizer display name, falling back to email."""
        return self.organizer_name or self.organizer_email


@dataclass(frozen=True, eq=False)
class ScheduledEvent:
    """An event that counts, with its effective start and end.

    Compared by identity: two identical calendar entries are still two events.
    """

    event: Event
    start: datetime
    end: datetime

    @property
    def summary(self) -> str:
        return self.event.summary


def should_consider(event: Event, diagnostics: list[str] | None = None) -> bool:
    """
    Decide whether an event counts towards time spent.

    Pure function - no I/O. Anomalies are logged and appended to diagnostics.
    """
    if not event.start:
        # full-day event
        return False
    if event.event_type in IGNORED_EVENT_TYPES:
        return False
    for attendee in event.attendees:
        if attendee.is_self and attendee.response_status == "declined":
            return False
    if event.organizer_self or event.creator_self:
        return True
    for attendee in event.attendees:
        if attendee.is_self:
            return attendee.response_status == "accepted"

    message = f"Self not found among attendees of {event.summary!r} (organizer {event.organizer!r})"
    logger.warning(message)
    if diagnostics is not None:
        diagnostics.append(message)
    return False


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC3339 timestamp carrying a UTC offset."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return parsed


def stretch_speedy_meeting(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Extend 50, 40 and 25 minute meetings to 60, 45 and 30 minutes."""
    stretched = STRETCHED_DURATIONS.get(end - start)
    if stretched is None:
        return start, end
    return start, start + stretched


def normalize_event(
    event: Event, diagnostics: list[str] | None = None
) -> tuple[datetime, datetime] | None:
    """
    Compute the effective (start, end) of an event, or None if it does not count.

    Pure function - no I/O.
    """
    if not should_consider(event, diagnostics):
        return None

    bounds = []
    for label, value in (("start", event.start), ("end", event.end)):
        try:
            bounds.append(parse_timestamp(value))
        except ValueError:
            message = f"Failed to parse {label} time [{value}] of event {event.summary!r}"
            logger.warning(message)
            if diagnostics is not None:
                diagnostics.append(message)
            return None

    start, end = bounds
    if end < start:
        message = f"Event {event.summary!r} ends [{event.end}] before it starts [{event.start}]"
        logger.warning(message)
        if diagnostics is not None:
            diagnostics.append(message)
        return None

    return stretch_speedy_meeting(start, end)


def normalize_events(
    events: list[Event], diagnostics: list[str] | None = None
) -> list[ScheduledEvent]:
    """Normalize a batch of events, dropping the ones that do not count."""
    scheduled = []
    for event in events:
        bounds = normalize_event(event, diagnostics)
        if bounds is None:
            continue
        scheduled.append(ScheduledEvent(event=event, start=bounds[0], end=bounds[1]))
    return scheduled
