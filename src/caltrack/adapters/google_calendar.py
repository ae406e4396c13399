"""Google Calendar API adapter."""

import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Patching summaries from the corrections file needs write access to events.
SCOPES = ["https://www.googleapis.com/auth/calendar.events"]


class CalendarError(Exception):
    """Raised when the calendar cannot be reached or queried."""


class GoogleCalendarAdapter:
    """
    Reads and corrects events in one Google calendar via the API.

    Implements CalendarRepository protocol.
    """

    def __init__(
        self,
        token_folder: str,
        source: str = "primary",
        client_secret_file: str = "",
    ):
        self.token_folder = token_folder
        self.source = source
        self.client_secret_file = client_secret_file
        self._token_path = Path(token_folder).expanduser() / "token.json"
        self._service = None

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.exceptions import RefreshError
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            raise CalendarError(f"No token at {self._token_path} - run 'caltrack auth'")

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
            except RefreshError as e:
                raise CalendarError(f"Unable to refresh token in {self._token_path} - run 'caltrack auth': {e}") from e
            self._save_token(creds)
            logger.debug(f"Refreshed token in {self._token_path}")

        return creds

    def _save_token(self, creds) -> None:
        self._token_path.parent.mkdir(parents=True, exist_ok=True)
        self._token_path.write_text(creds.to_json())
        self._token_path.chmod(0o600)

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        if self._service is None:
            self._service = build("calendar", "v3", credentials=self._get_credentials())
        return self._service

    def authenticate(self) -> None:
        """Run OAuth flow and save token.json."""
        from google_auth_oauthlib.flow import InstalledAppFlow

        if not self.client_secret_file:
            raise CalendarError("No client secret file configured")

        secret_path = Path(self.client_secret_file).expanduser()
        if not secret_path.exists():
            raise CalendarError(f"Client secret file not found: {secret_path}")

        flow = InstalledAppFlow.from_client_secrets_file(str(secret_path), SCOPES)
        creds = flow.run_local_server(port=0)
        self._save_token(creds)

    def fetch_items(self, start: datetime, end: datetime) -> list[dict]:
        """Fetch raw event resources between start and end, following pagination."""
        from googleapiclient.errors import HttpError

        service = self._build_service()
        items: list[dict] = []
        page_token = None
        while True:
            try:
                result = (
                    service.events()
                    .list(
                        calendarId=self.source,
                        timeMin=start.isoformat(),
                        timeMax=end.isoformat(),
                        singleEvents=True,
                        pageToken=page_token,
                    )
                    .execute()
                )
            except HttpError as e:
                raise CalendarError(f"Unable to retrieve events from {self.source}: {e}") from e

            items.extend(result.get("items", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Fetched {len(items)} events from {self.source}")
        return items

    def update_summary(self, event_id: str, summary: str) -> None:
        """Patch the summary of an event without notifying attendees."""
        from googleapiclient.errors import HttpError

        service = self._build_service()
        try:
            service.events().patch(
                calendarId=self.source,
                eventId=event_id,
                body={"summary": summary},
                sendUpdates="none",
            ).execute()
        except HttpError as e:
            raise CalendarError(f"Failed to update summary of event {event_id!r}: {e}") from e
