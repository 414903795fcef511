"""
sheets.py
Append contact submissions to a Google Sheet, one row per submission.

The column order is shared with whoever reads the sheet; do not reorder.
Append-only: no dedupe, no updates, no retries.
"""

import logging
from typing import List

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from contact_api.config import Settings
from contact_api.schemas import Submission
from contact_api.sinks import ContactSink

LOG = logging.getLogger("contact_api.sheets")

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

SHEET_HEADERS = [
    "timestamp", "source", "name", "email", "phone", "subject", "message",
    "vehicle", "insurer", "claim_number", "photos", "ip", "user_agent",
]


def _col_letter(n: int) -> str:
    res = ""
    while n:
        n, r = divmod(n - 1, 26)
        res = chr(65 + r) + res
    return res


def unescape_private_key(key: str) -> str:
    return (key or "").replace("\\n", "\n")


def build_row(sub: Submission) -> List[str]:
    if sub.photo_urls:
        photos = "\n".join(sub.photo_urls)
    else:
        photos = sub.extras.get("photo_count", "")
    return [
        sub.timestamp,
        sub.source,
        sub.name,
        sub.email,
        sub.phone,
        sub.subject,
        sub.message,
        sub.extras.get("vehicle", ""),
        sub.extras.get("insurer", ""),
        sub.extras.get("claim_number", ""),
        photos,
        sub.ip,
        sub.user_agent,
    ]


class SheetsSink(ContactSink):
    name = "sheets"

    def __init__(self, settings: Settings, service=None):
        self.settings = settings
        self._values = service.spreadsheets().values() if service is not None else None

    @property
    def configured(self) -> bool:
        return self.settings.sheets_configured

    def _sheet_title(self) -> str:
        return self.settings.SHEET_RANGE.split("!")[0]

    def _values_api(self):
        if self._values is not None:
            return self._values
        s = self.settings
        if not self.configured:
            raise RuntimeError("SPREADSHEET_ID / GOOGLE_SERVICE_ACCOUNT_EMAIL / GOOGLE_PRIVATE_KEY not set")
        creds = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": s.GOOGLE_SERVICE_ACCOUNT_EMAIL,
                "private_key": unescape_private_key(s.GOOGLE_PRIVATE_KEY),
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )
        root = build("sheets", "v4", credentials=creds, cache_discovery=False)
        self._values = root.spreadsheets().values()
        return self._values

    def deliver(self, submission: Submission) -> bool:
        if not self.configured:
            LOG.error("Google Sheets credentials not set; submission not recorded")
            return False
        try:
            req = self._values_api().append(
                spreadsheetId=self.settings.SPREADSHEET_ID,
                range=self.settings.SHEET_RANGE,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [build_row(submission)]},
            )
            req.execute()
        except HttpError as e:
            LOG.error("Sheets append failed (%s): %s", getattr(e.resp, "status", "?"), e)
            return False
        except Exception:
            LOG.exception("Unexpected error appending submission to sheet")
            return False
        LOG.info("Submission from %s appended to %s", submission.name, self.settings.SHEET_RANGE)
        return True

    def ensure_header_row(self) -> None:
        """Overwrite row 1 of the data sheet with SHEET_HEADERS."""
        title = self._sheet_title()
        rng = f"{title}!A1:{_col_letter(len(SHEET_HEADERS))}1"
        self._values_api().update(
            spreadsheetId=self.settings.SPREADSHEET_ID,
            range=rng,
            valueInputOption="RAW",
            body={"values": [SHEET_HEADERS]},
        ).execute()
        LOG.info("Header row written to %s", rng)
