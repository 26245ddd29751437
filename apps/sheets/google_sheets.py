"""
Mirror of the tables in a shared Google spreadsheet.

The office keeps reading and editing the spreadsheet, so tables can be
pushed to it and pulled back from it. Access uses a service account.
"""

import logging

import gspread
from django.conf import settings
from django.db import transaction
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from .exceptions import GoogleSheetsConfigError, SheetImportError
from .header_map import headers_for
from .schema import SCHEMAS
from .services import TABLE_ORDER, export_records, replace_records

logger = logging.getLogger(__name__)

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive',
]


class GoogleSheetMirror:
    """
    One spreadsheet holding a worksheet per table.

    Args:
        spreadsheet_key: Spreadsheet key, GOOGLE_SHEETS_SPREADSHEET by default
        client: Authorized gspread client; built from the service account
            file in GOOGLE_SERVICE_ACCOUNT_FILE when omitted
    """

    def __init__(self, spreadsheet_key=None, client=None):
        self.spreadsheet_key = spreadsheet_key or settings.GOOGLE_SHEETS_SPREADSHEET
        if not self.spreadsheet_key:
            raise GoogleSheetsConfigError('GOOGLE_SHEETS_SPREADSHEET is not set')
        self.client = client or self._authorize()
        try:
            self.spreadsheet = self.client.open_by_key(self.spreadsheet_key)
        except (gspread.exceptions.SpreadsheetNotFound, gspread.exceptions.APIError) as e:
            raise GoogleSheetsConfigError(f"Cannot open spreadsheet: {e}")

    @staticmethod
    def _authorize():
        path = settings.GOOGLE_SERVICE_ACCOUNT_FILE
        if not path:
            raise GoogleSheetsConfigError('GOOGLE_SERVICE_ACCOUNT_FILE is not set')
        try:
            credentials = Credentials.from_service_account_file(path, scopes=SCOPES)
        except (OSError, ValueError, GoogleAuthError) as e:
            raise GoogleSheetsConfigError(f"Invalid service account file: {e}")
        return gspread.authorize(credentials)

    def worksheet(self, table):
        """Worksheet of a table, created with its header row when missing."""
        headers = headers_for(table)
        try:
            return self.spreadsheet.worksheet(table)
        except gspread.exceptions.WorksheetNotFound:
            worksheet = self.spreadsheet.add_worksheet(title=table, rows=1000, cols=len(headers))
            worksheet.append_row(headers)
            logger.info("Created worksheet %s", table)
            return worksheet

    def ensure_worksheets(self):
        return {table: self.worksheet(table) for table in TABLE_ORDER}

    def push(self, tables=None) -> dict:
        """
        Overwrite worksheets with the current rows.

        Returns:
            dict: Rows written per table
        """
        written = {}
        for table in tables or TABLE_ORDER:
            schema = SCHEMAS[table]
            rows = [headers_for(table)]
            rows.extend(schema.to_row(record) for record in export_records(table))

            worksheet = self.worksheet(table)
            worksheet.clear()
            worksheet.update(values=rows, range_name='A1')
            written[table] = len(rows) - 1
            logger.info("Pushed %d rows to worksheet %s", written[table], table)
        return written

    def pull(self, tables=None) -> dict:
        """
        Replace tables with the worksheet contents.

        Every worksheet is read before anything is written, and all tables
        are replaced in one transaction, so a failing table leaves the
        others as they were.

        Returns:
            dict: Counts per table as returned by ``replace_records``
        """
        sheets = {}
        for table in tables or TABLE_ORDER:
            try:
                values = self.worksheet(table).get_all_values()
            except gspread.exceptions.APIError as e:
                raise SheetImportError(f"{table}: {e}")
            if values:
                sheets[table] = SCHEMAS[table].rows_to_records(values[0], values[1:])

        results = {}
        with transaction.atomic():
            for table, records in sheets.items():
                results[table] = replace_records(table, records)
        return results
