"""caltrack CLI - time spent per day and per category, from Google Calendar."""

import logging
import sys
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfoNotFoundError

import click
from dateutil import parser as date_parser

from .adapters.corrections import save_unrecognized
from .adapters.google_calendar import CalendarError
from .config import ConfigError, load_config
from .core.report import render_report, week_start
from .core.totals import compute_totals
from .workflows import fetch_events, get_calendar, push_corrections, read_categories

logger = logging.getLogger(__name__)


class DateTimeParam(click.ParamType):
    """Any unambiguous date or date-time."""

    name = "datetime"

    def convert(self, value, param, ctx):
        if isinstance(value, datetime):
            return value
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            self.fail(f"{value!r} is not a recognizable date/time: {e}", param, ctx)


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


def _localize(dt: datetime, tz: tzinfo) -> datetime:
    """Interpret naive date-times in the reference zone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt


@click.group()
@click.version_option()
def main():
    """caltrack - calendar time statistics."""
    pass


@main.command()
@click.option("--config", "config_file", default=None, help="caltrack.conf file to read.")
@click.option("--categories", "categories_file", default=None, help="YAML file with category patterns.")
@click.option("--source", default=None, help="ID of the Google Calendar to read.")
@click.option(
    "--weeks",
    default=0,
    type=int,
    help="Start at the beginning of the week this many weeks before the current one. Takes precedence over --start.",
)
@click.option("--start", type=DateTimeParam(), default=None, help="Start time. Defaults to beginning of current week.")
@click.option("--end", type=DateTimeParam(), default=None, help="End time. Defaults to now.")
@click.option(
    "--cache",
    "cache_file",
    default=None,
    help="JSON event cache. Created from fetched events if missing, otherwise read instead of the calendar.",
)
@click.option("--decimal-output", is_flag=True, help="Print daily totals as decimal hours.")
@click.option("--classification-details", is_flag=True, help="Print which events went to each category.")
@click.option(
    "--corrections",
    "corrections_file",
    default=None,
    help="YAML file to apply summary corrections from, then save unrecognized events to.",
)
@click.option("--timezone", default=None, help="Time zone for day boundaries, e.g. Europe/Warsaw.")
@click.option("--debug", is_flag=True, help="Enable debug logging")
def report(
    config_file: str | None,
    categories_file: str | None,
    source: str | None,
    weeks: int,
    start: datetime | None,
    end: datetime | None,
    cache_file: str | None,
    decimal_output: bool,
    classification_details: bool,
    corrections_file: str | None,
    timezone: str | None,
    debug: bool,
):
    """Show time spent per day and per category."""
    _setup_logging(debug)
    config = load_config(config_file)
    if timezone:
        config.timezone = timezone
    try:
        tz = config.tz()
    except (ZoneInfoNotFoundError, ValueError):
        click.echo(f"Error: unknown time zone {config.timezone!r}", err=True)
        sys.exit(1)

    end = _localize(end, tz) if end else datetime.now(tz)
    if weeks:
        start = week_start(weeks, end, tz)
    elif start:
        start = _localize(start, tz)
    else:
        start = week_start(0, end, tz)
    cache_file = cache_file or config.cache_file
    corrections_file = corrections_file or config.corrections_file

    calendar = get_calendar(config, source)
    try:
        push_corrections(calendar, corrections_file)
        events = fetch_events(calendar, start, end, cache_file)
    except (CalendarError, ConfigError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not events:
        click.echo("No events found.")
        return

    try:
        categories = read_categories(categories_file or config.categories_file)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    totals = compute_totals(events, categories, tz)
    click.echo(render_report(totals, categories, decimal_output, classification_details))

    if corrections_file:
        try:
            save_unrecognized(corrections_file, totals.unrecognized)
        except OSError as e:
            click.echo(f"Error: cannot write {corrections_file}: {e}", err=True)
            sys.exit(1)
        logger.info(f"Saved {len(totals.unrecognized)} unrecognized events to {corrections_file}")


@main.command()
@click.option("--config", "config_file", default=None, help="caltrack.conf file to read.")
def auth(config_file: str | None):
    """Authenticate with Google Calendar."""
    config = load_config(config_file)
    try:
        get_calendar(config).authenticate()
    except CalendarError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("Authenticated.")
