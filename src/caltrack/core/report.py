"""Pure report formatting logic - no I/O dependencies."""

from datetime import datetime, time, timedelta, tzinfo

from .category import UNCATEGORIZED, Category
from .events import Event, parse_timestamp
from .totals import Totals


def week_start(weeks_ago: int, now: datetime, tz: tzinfo | None = None) -> datetime:
    """Local midnight of the Monday of the ISO week `weeks_ago` weeks before `now`."""
    tz = tz or now.tzinfo
    day = (now - timedelta(weeks=weeks_ago)).astimezone(tz).date()
    monday = day - timedelta(days=day.isoweekday() - 1)
    return datetime.combine(monday, time(0, 0), tzinfo=tz)


def format_duration(d: timedelta) -> str:
    """Format a duration like 1h30m0s."""
    total_us = d // timedelta(microseconds=1)
    if total_us == 0:
        return "0s"
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    hours, rest = divmod(total_us, 3600 * 10**6)
    minutes, rest = divmod(rest, 60 * 10**6)
    seconds, micros = divmod(rest, 10**6)

    secs = str(seconds)
    if micros:
        secs += f".{micros:06d}".rstrip("0")
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


def format_day_total(d: timedelta, decimal: bool = False) -> str:
    """Day total as decimal hours or as a duration."""
    if decimal:
        return f"{d / timedelta(hours=1):f}"
    return format_duration(d)


def format_unrecognized_event(event: Event) -> str:
    """One line describing an event that matched no category."""
    if not event.start or not event.end:
        return "?"
    try:
        start = parse_timestamp(event.start)
        end = parse_timestamp(event.end)
    except ValueError:
        return "?"
    return f"{event.start} {format_duration(end - start):>10}  {event.summary}"


def render_report(
    totals: Totals,
    categories: list[Category],
    decimal: bool = False,
    details: bool = False,
) -> str:
    """
    Render totals as plain text.

    Pure function - no I/O.
    """
    lines = []
    days = sorted(totals.day_totals)
    if days:
        lines.append("Time spent per day:")
    for day in days:
        lines.append(f"{day.isoformat()}: {format_day_total(totals.day_totals[day], decimal)}")

    if not categories:
        return "\n".join(lines)

    total = totals.total
    names = [c.name for c in categories]
    if UNCATEGORIZED not in names and totals.category_totals.get(UNCATEGORIZED):
        names.append(UNCATEGORIZED)

    lines.append("Time spent per category:")
    for name in names:
        value = totals.category_totals.get(name, timedelta())
        fraction = (value / total) * 100 if total else 0.0
        label = name if name != UNCATEGORIZED else "(uncategorized)"
        lines.append(f"{fraction:4.1f}% {label}")
        if details:
            for summary in totals.category_details.get(name, []):
                lines.append(f" - {summary}")

    if totals.unrecognized:
        lines.append("Unrecognized:")
        for event in totals.unrecognized:
            lines.append(format_unrecognized_event(event))

    return "\n".join(lines)
