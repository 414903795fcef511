#!/usr/bin/env python3
"""
Write the contact-submission header row to row 1 of the data sheet.

Env (required):
  SPREADSHEET_ID, GOOGLE_SERVICE_ACCOUNT_EMAIL, GOOGLE_PRIVATE_KEY
Env (optional):
  SHEET_RANGE (default: Sheet1!A:M)
"""

import sys
import logging
from dotenv import load_dotenv

from contact_api.config import Settings
from contact_api.sheets import SHEET_HEADERS, SheetsSink

LOG = logging.getLogger("contact_api.scripts.init_contact_sheet")
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")


def main() -> int:
    load_dotenv()
    settings = Settings()  # type: ignore
    sink = SheetsSink(settings)
    if not sink.configured:
        LOG.error("Missing required env vars: SPREADSHEET_ID, GOOGLE_SERVICE_ACCOUNT_EMAIL and/or GOOGLE_PRIVATE_KEY")
        return 1
    sink.ensure_header_row()
    LOG.info("Sheet %s ready with %d columns", settings.SPREADSHEET_ID, len(SHEET_HEADERS))
    return 0

if __name__ == "__main__":
    sys.exit(main())
