"""Tests for the caltrack CLI."""

from datetime import datetime
from unittest.mock import patch, MagicMock
from zoneinfo import ZoneInfo

import pytest
import yaml
from click.testing import CliRunner
from google.auth.exceptions import RefreshError

from caltrack.adapters.google_calendar import CalendarError
from caltrack.cli import main


def item(event_id: str, start: str, end: str, summary: str) -> dict:
    return {
        "id": event_id,
        "summary": summary,
        "start": {"dateTime": start},
        "end": {"dateTime": end},
        "organizer": {"email": "me@example.com", "self": True},
    }


ITEMS = [
    item("a", "2023-03-25T13:00:00+01:00", "2023-03-25T13:30:00+01:00", "Coffee"),
    item("b", "2023-03-25T14:00:00+01:00", "2023-03-25T14:15:00+01:00", "m/s"),
    item("c", "2023-03-25T23:00:00+01:00", "2023-03-26T01:30:00+01:00", "m/s late"),
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def files(tmp_path):
    categories = tmp_path / "categories.yaml"
    categories.write_text(
        yaml.safe_dump({"categories": [{"name": "communications", "match": [{"re": "m/s"}]}]})
    )
    conf = tmp_path / "caltrack.conf"
    conf.write_text(
        f"timezone = Etc/GMT-1\ncategories_file = {categories}\ntoken_folder = {tmp_path}\n"
    )
    return tmp_path


@pytest.fixture
def calendar():
    repo = MagicMock()
    repo.fetch_items.return_value = ITEMS
    with patch("caltrack.cli.get_calendar", return_value=repo):
        yield repo


def report_args(files, *extra):
    return ["report", "--config", str(files / "caltrack.conf"), "--start", "2023-03-20", "--end", "2023-03-27", *extra]


class TestReport:
    def test_prints_totals(self, runner, files, calendar):
        result = runner.invoke(main, report_args(files))

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "Time spent per day:",
            "2023-03-25: 1h45m0s",
            "2023-03-26: 1h30m0s",
            "Time spent per category:",
            "84.6% communications",
            "15.4% (uncategorized)",
            "Unrecognized:",
            "2023-03-25T13:00:00+01:00      30m0s  Coffee",
        ]

    def test_window_passed_to_calendar(self, runner, files, calendar):
        runner.invoke(main, report_args(files))

        start, end = calendar.fetch_items.call_args.args
        tz = ZoneInfo("Etc/GMT-1")
        assert start == datetime(2023, 3, 20, tzinfo=tz)
        assert end == datetime(2023, 3, 27, tzinfo=tz)

    def test_weeks_overrides_start(self, runner, files, calendar):
        runner.invoke(main, report_args(files, "--weeks", "2"))

        start, _ = calendar.fetch_items.call_args.args
        assert start == datetime(2023, 3, 13, tzinfo=ZoneInfo("Etc/GMT-1"))

    def test_decimal_output_and_details(self, runner, files, calendar):
        result = runner.invoke(main, report_args(files, "--decimal-output", "--classification-details"))

        assert "2023-03-25: 1.750000" in result.output
        assert " - m/s late" in result.output

    def test_no_events(self, runner, files, calendar):
        calendar.fetch_items.return_value = []

        result = runner.invoke(main, report_args(files))

        assert result.exit_code == 0
        assert result.output == "No events found.\n"

    def test_calendar_error(self, runner, files, calendar):
        calendar.fetch_items.side_effect = CalendarError("offline")

        result = runner.invoke(main, report_args(files))

        assert result.exit_code == 1
        assert "Error: offline" in result.output

    def test_missing_categories_file(self, runner, files, calendar):
        (files / "categories.yaml").unlink()

        result = runner.invoke(main, report_args(files))

        assert result.exit_code == 0
        assert "Time spent per category:" not in result.output

    def test_bad_start(self, runner, files, calendar):
        result = runner.invoke(main, ["report", "--config", str(files / "caltrack.conf"), "--start", "whenever"])
        assert result.exit_code == 2

    def test_unknown_timezone(self, runner, files, calendar):
        result = runner.invoke(main, report_args(files, "--timezone", "Mars/Olympus"))
        assert result.exit_code == 1
        assert "unknown time zone" in result.output

    def test_cache_file(self, runner, files, calendar):
        cache = files / "events.json"

        runner.invoke(main, report_args(files, "--cache", str(cache)))
        result = runner.invoke(main, report_args(files, "--cache", str(cache)))

        assert result.exit_code == 0
        assert calendar.fetch_items.call_count == 1
        assert cache.exists()

    def test_corrections_round_trip(self, runner, files, calendar):
        corrections = files / "corrections.yaml"
        corrections.write_text(yaml.safe_dump({"corrections": [{"id": "x", "summary": "m/s fixed"}]}))

        result = runner.invoke(main, report_args(files, "--corrections", str(corrections)))

        assert result.exit_code == 0, result.output
        calendar.update_summary.assert_called_once_with("x", "m/s fixed")
        saved = yaml.safe_load(corrections.read_text())
        assert saved == {"corrections": [{"id": "a", "summary": "Coffee", "organizer": "me@example.com"}]}

    def test_correction_without_id(self, runner, files, calendar):
        corrections = files / "corrections.yaml"
        corrections.write_text(yaml.safe_dump({"corrections": [{"summary": "m/s fixed"}]}))

        result = runner.invoke(main, report_args(files, "--corrections", str(corrections)))

        assert result.exit_code == 1
        assert "Error: Correction without an 'id'" in result.output
        calendar.update_summary.assert_not_called()

    def test_malformed_corrections_yaml(self, runner, files, calendar):
        corrections = files / "corrections.yaml"
        corrections.write_text("corrections: [unclosed\n")

        result = runner.invoke(main, report_args(files, "--corrections", str(corrections)))

        assert result.exit_code == 1
        assert "Error: Invalid YAML" in result.output

    def test_unwritable_corrections_file(self, runner, files, calendar):
        corrections = files / "missing-dir" / "corrections.yaml"

        result = runner.invoke(main, report_args(files, "--corrections", str(corrections)))

        assert result.exit_code == 1
        assert "Time spent per day:" in result.output
        assert f"Error: cannot write {corrections}" in result.output

    def test_unwritable_cache(self, runner, files, calendar):
        cache = files / "cache"
        cache.mkdir()

        result = runner.invoke(main, report_args(files, "--cache", str(cache)))

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not isinstance(result.exception, OSError)

    @patch("google.oauth2.credentials.Credentials.from_authorized_user_file")
    def test_revoked_token(self, mock_load, runner, files):
        (files / "token.json").write_text("{}")
        creds = MagicMock(expired=True, refresh_token="r")
        creds.refresh.side_effect = RefreshError("invalid_grant")
        mock_load.return_value = creds

        result = runner.invoke(main, report_args(files))

        assert result.exit_code == 1
        assert "Error: Unable to refresh token" in result.output


class TestAuth:
    def test_auth(self, runner, files, calendar):
        result = runner.invoke(main, ["auth", "--config", str(files / "caltrack.conf")])

        assert result.exit_code == 0
        calendar.authenticate.assert_called_once()

    def test_auth_error(self, runner, files, calendar):
        calendar.authenticate.side_effect = CalendarError("No client secret file configured")

        result = runner.invoke(main, ["auth", "--config", str(files / "caltrack.conf")])

        assert result.exit_code == 1
        assert "No client secret" in result.output
