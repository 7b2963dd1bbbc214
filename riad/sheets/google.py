"""Google Sheets store implementation.

Uses a Google Cloud service account to read and append rows through the
Sheets API v4.  The service account JSON key path is read from the
``GOOGLE_SERVICE_ACCOUNT_JSON`` environment variable when not passed in.
"""

from __future__ import annotations

import asyncio
import logging
import os
from functools import partial
from typing import Any

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from .base import SheetStore

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsStore(SheetStore):
    """SheetStore backed by one Google spreadsheet."""

    def __init__(
        self,
        spreadsheet_id: str,
        service_account_path: str | None = None,
    ) -> None:
        sa_path = service_account_path or os.environ.get(
            "GOOGLE_SERVICE_ACCOUNT_JSON", ""
        )
        if not sa_path:
            raise ValueError(
                "Google service account JSON path must be provided via "
                "constructor argument or GOOGLE_SERVICE_ACCOUNT_JSON env var."
            )
        if not spreadsheet_id:
            raise ValueError("A spreadsheet id is required.")
        self._spreadsheet_id = spreadsheet_id
        self._credentials = Credentials.from_service_account_file(
            sa_path, scopes=SCOPES
        )
        self._service = build(
            "sheets", "v4", credentials=self._credentials, cache_discovery=False
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_in_executor(self, func, *args, **kwargs) -> Any:
        """Run a synchronous Google API call in the default thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, partial(func, *args, **kwargs)
        )

    # ------------------------------------------------------------------
    # SheetStore interface
    # ------------------------------------------------------------------

    async def get_rows(self, sheet_name: str) -> list[list[str]]:
        """Read every populated cell of a tab as formatted strings."""
        response = await self._run_in_executor(
            self._service.spreadsheets()
            .values()
            .get(
                spreadsheetId=self._spreadsheet_id,
                range=sheet_name,
                valueRenderOption="FORMATTED_VALUE",
            )
            .execute
        )
        rows = response.get("values", [])
        logger.debug("Read %d rows from %s", len(rows), sheet_name)
        return [[str(cell) for cell in row] for row in rows]

    async def append_row(self, sheet_name: str, values: list) -> None:
        """Append a row below the table, inserting a new sheet row."""
        body = {"values": [["" if v is None else v for v in values]]}

        result = await self._run_in_executor(
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self._spreadsheet_id,
                range=sheet_name,
                # Form input is stored verbatim, never parsed as numbers or formulas
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body=body,
            )
            .execute
        )

        logger.info(
            "Appended row to %s (%s)",
            sheet_name,
            result.get("updates", {}).get("updatedRange", "unknown range"),
        )
