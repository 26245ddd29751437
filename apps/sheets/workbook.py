"""
Excel workbook backup and restore.

The workbook has one worksheet per table with the Chinese headers in the
first row, the same layout as the shared Google spreadsheet.
"""

import io
import logging
import zipfile

from django.db import transaction
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from .exceptions import SheetImportError
from .header_map import headers_for
from .schema import SCHEMAS
from .services import TABLE_ORDER, export_records, replace_records

logger = logging.getLogger(__name__)

HEADER_FILL = PatternFill(start_color='DDEBF7', end_color='DDEBF7', fill_type='solid')
HEADER_FONT = Font(bold=True)
MIN_WIDTH = 10
MAX_WIDTH = 50


def _autosize(worksheet):
    for index, column in enumerate(worksheet.iter_cols(values_only=True), 1):
        longest = max((len(str(value)) for value in column if value not in (None, '')), default=0)
        width = min(max(longest + 2, MIN_WIDTH), MAX_WIDTH)
        worksheet.column_dimensions[get_column_letter(index)].width = width


def export_workbook() -> bytes:
    """Every table as an xlsx workbook."""
    workbook = Workbook()
    workbook.remove(workbook.active)

    for table in TABLE_ORDER:
        schema = SCHEMAS[table]
        worksheet = workbook.create_sheet(title=table)
        worksheet.append(headers_for(table))
        for cell in worksheet[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal='center')

        for record in export_records(table):
            worksheet.append(schema.to_row(record))

        worksheet.freeze_panes = 'A2'
        _autosize(worksheet)

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def read_workbook(file) -> dict:
    """
    Records per table found in an xlsx workbook.

    Worksheets that are not tables are ignored.

    Raises:
        SheetImportError: If the file is not a readable workbook
    """
    try:
        workbook = load_workbook(file, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise SheetImportError(f"Cannot read workbook: {e}")

    tables = {}
    try:
        for table in TABLE_ORDER:
            if table not in workbook.sheetnames:
                continue
            rows = list(workbook[table].iter_rows(values_only=True))
            if not rows:
                continue
            tables[table] = SCHEMAS[table].rows_to_records(rows[0], rows[1:])
    finally:
        workbook.close()
    return tables


@transaction.atomic
def import_workbook(file) -> dict:
    """
    Restore the tables found in a workbook.

    Each worksheet replaces its table. Tables without a worksheet are left
    untouched.

    Returns:
        dict: Counts per table as returned by ``replace_records``
    """
    tables = read_workbook(file)
    if not tables:
        raise SheetImportError('Workbook contains no known worksheet')

    results = {}
    for table, records in tables.items():
        results[table] = replace_records(table, records)

    logger.info("Workbook imported: %s", ', '.join(results))
    return results
