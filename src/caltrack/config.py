"""Configuration management for caltrack."""

import logging
import os
import re
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from zoneinfo import ZoneInfo

import yaml
from dateutil import tz as dateutil_tz

from .core.category import UNCATEGORIZED, Category

logger = logging.getLogger(__name__)

CALTRACK_HOME = Path(os.environ.get("CALTRACK_HOME", Path.home() / ".caltrack"))
CONFIG_FILE = CALTRACK_HOME / "config" / "caltrack.conf"
CATEGORIES_FILE = CALTRACK_HOME / "config" / "categories.yaml"


class ConfigError(Exception):
    """Raised when a configuration file is malformed."""


@dataclass
class Config:
    """caltrack configuration."""

    timezone: str = ""
    source: str = "primary"
    client_secret_file: str = ""
    token_folder: str = str(CALTRACK_HOME / "config")
    categories_file: str = str(CATEGORIES_FILE)
    cache_file: str = ""
    corrections_file: str = ""

    def tz(self) -> tzinfo:
        """Reference time zone for day boundaries; the local zone when unset."""
        if self.timezone:
            return ZoneInfo(self.timezone)
        return dateutil_tz.tzlocal()


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | str | None = None) -> Config:
    """Load configuration from caltrack.conf file."""
    config = Config()
    config_file = Path(path).expanduser() if path else CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "source":
                config.source = value
            case "client_secret_file":
                config.client_secret_file = value
            case "token_folder":
                config.token_folder = value
            case "categories_file":
                config.categories_file = value
            case "cache_file":
                config.cache_file = value
            case "corrections_file":
                config.corrections_file = value
            case _:
                logger.warning(f"Ignoring unknown config key '{key}' in {config_file}")

    return config


def load_categories(path: Path | str) -> list[Category]:
    """
    Load categories from a YAML file.

    Format:
        categories:
          - name: communications
            match:
              - re: "m/s"

    Raises FileNotFoundError if the file does not exist, ConfigError if it is malformed.
    """
    try:
        data = yaml.safe_load(Path(path).expanduser().read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse categories file {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, dict) or not isinstance(data.get("categories", []), list):
        raise ConfigError(f"Categories file {path} must contain a 'categories' list")

    categories = []
    seen: set[str] = set()
    for item in data.get("categories") or []:
        name = str(item.get("name") or UNCATEGORIZED)
        if name in seen:
            raise ConfigError(f"Duplicate category '{name}' in {path}")
        seen.add(name)

        patterns = []
        for match in item.get("match") or []:
            try:
                patterns.append(re.compile(match["re"]))
            except (KeyError, TypeError) as e:
                raise ConfigError(f"Category '{name}' has a match entry without 're'") from e
            except re.error as e:
                raise ConfigError(f"Invalid pattern {match['re']!r} in category '{name}': {e}") from e
        categories.append(Category(name=name, patterns=tuple(patterns)))

    return categories
