import logging
from typing import Any, Callable, List, Optional
from urllib.parse import quote

from google.auth.transport.requests import AuthorizedSession
from google.oauth2 import service_account

from typescore import config

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"
APPEND_URL = "https://sheets.googleapis.com/v4/spreadsheets/{spreadsheet_id}/values/{value_range}:append"


class SheetsExportError(RuntimeError):
    """Raised when the Sheets API rejects an append request."""


class SheetsExporter:
    """Append submitted report rows to a Google spreadsheet with a service account."""

    def __init__(
        self,
        client_email: Optional[str],
        private_key: Optional[str],
        spreadsheet_id: Optional[str],
        value_range: str = config.SHEETS_RANGE,
        timeout: float = config.SHEETS_TIMEOUT_S,
        session_factory: Optional[Callable[[], AuthorizedSession]] = None,
    ):
        self.client_email = client_email
        # keys stored in env files usually carry literal "\n" sequences
        self.private_key = private_key.replace("\\n", "\n") if private_key else None
        self.spreadsheet_id = spreadsheet_id
        self.value_range = value_range
        self.timeout = timeout
        self._session_factory = session_factory or self._authorized_session

    @classmethod
    def from_config(cls) -> "SheetsExporter":
        return cls(
            config.GOOGLE_CREDENTIAL_CLIENT_EMAIL,
            config.GOOGLE_CREDENTIAL_CLIENT_PRIVATE_KEY,
            config.GOOGLE_SPREADSHEET_ID,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.client_email and self.private_key and self.spreadsheet_id)

    def _authorized_session(self) -> AuthorizedSession:
        credentials = service_account.Credentials.from_service_account_info(
            {
                "client_email": self.client_email,
                "private_key": self.private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )
        return AuthorizedSession(credentials)

    def append_rows(self, rows: List[List[Any]]) -> None:
        if not self.enabled:
            raise SheetsExportError("Spreadsheet export is not configured")
        url = APPEND_URL.format(
            spreadsheet_id=self.spreadsheet_id,
            value_range=quote(self.value_range, safe="!:"),
        )
        session = self._session_factory()
        response = session.post(
            url,
            params={"valueInputOption": "RAW"},
            json={"values": rows},
            timeout=self.timeout,
        )
        if response.status_code >= 400:
            raise SheetsExportError(f"Sheets append failed ({response.status_code}): {response.text}")
        logger.info("Appended %d rows to spreadsheet %s.", len(rows), self.spreadsheet_id)
