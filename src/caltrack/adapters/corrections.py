"""YAML corrections file: unrecognized events out, fixed summaries back in."""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path

import yaml

from caltrack.config import ConfigError
from caltrack.core.events import Event
from caltrack.ports.calendar_repo import CalendarRepository

logger = logging.getLogger(__name__)


@dataclass
class Correction:
    """A summary to push back to the calendar for one event."""

    id: str
    summary: str
    organizer: str = ""


def load_corrections(path: Path | str) -> list[Correction]:
    """Load corrections. A missing file means there is nothing to correct."""
    path = Path(path).expanduser()
    if not path.exists():
        return []
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a mapping with a 'corrections' list")

    corrections = []
    for item in data.get("corrections") or []:
        if not isinstance(item, dict) or not item.get("id"):
            raise ConfigError(f"Correction without an 'id' in {path}: {item!r}")
        corrections.append(
            Correction(
                id=str(item["id"]),
                summary=str(item.get("summary") or ""),
                organizer=str(item.get("organizer") or ""),
            )
        )
    return corrections


def save_unrecognized(path: Path | str, events: list[Event]) -> None:
    """Write unrecognized events as corrections to be edited by hand."""
    corrections = [
        Correction(id=e.id, summary=e.summary, organizer=e.organizer) for e in events
    ]
    Path(path).expanduser().write_text(
        yaml.safe_dump(
            {"corrections": [asdict(c) for c in corrections]},
            sort_keys=False,
            allow_unicode=True,
        )
    )


def apply_corrections(repository: CalendarRepository, corrections: list[Correction]) -> int:
    """Push corrected summaries to the calendar. Returns how many were applied."""
    if not corrections:
        return 0
    logger.info(f"Updating summary of {len(corrections)} events...")
    for correction in corrections:
        repository.update_summary(correction.id, correction.summary)
    logger.info("Summaries updated.")
    return len(corrections)
