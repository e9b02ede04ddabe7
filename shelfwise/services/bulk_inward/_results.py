"""Downloadable result workbook for a bulk inward run."""
from __future__ import annotations

import base64
import io

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from ...utils.timezone_utils import TimezoneUtils
from ._rows import REQUIRED_COLUMNS, STATUS_ERROR, STATUS_SKIPPED, STATUS_SUCCESS

XLSX_MIME_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
SHEET_TITLE = 'Inward Results'

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(fill_type='solid', fgColor='FFE0E0E0')

STATUS_STYLES = {
    STATUS_SUCCESS: (PatternFill(fill_type='solid', fgColor='FFD4EDDA'), Font(color='FF155724')),
    STATUS_ERROR: (PatternFill(fill_type='solid', fgColor='FFF8D7DA'), Font(color='FF721C24')),
    STATUS_SKIPPED: (PatternFill(fill_type='solid', fgColor='FFFFF3CD'), Font(color='FF856404')),
}

COLUMN_WIDTHS = {
    'Warehouse Code': 20,
    'Status': 12,
    'Message': 60,
}


def result_columns(results) -> list:
    """Canonical columns, then any extra input columns in first-seen order, then Status/Message."""
    columns = list(REQUIRED_COLUMNS)
    for result in results:
        for key in result.row.extras:
            if key not in columns:
                columns.append(key)
    return columns + ['Status', 'Message']


def build_result_workbook(results) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    columns = result_columns(results)
    sheet.append(columns)
    for cell in sheet[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    for index, column in enumerate(columns, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTHS.get(column, 22)

    status_index = columns.index('Status') + 1
    for result in results:
        record = result.as_record()
        sheet.append([record.get(column) for column in columns])
        styles = STATUS_STYLES.get(result.status)
        if styles:
            status_cell = sheet.cell(row=sheet.max_row, column=status_index)
            status_cell.fill, status_cell.font = styles

    sheet.freeze_panes = 'A2'
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def encode_result_file(results) -> dict:
    payload = build_result_workbook(results)
    stamp = int(TimezoneUtils.utc_now().timestamp() * 1000)
    return {
        'name': f'bulk-inward-results-{stamp}.xlsx',
        'data': base64.b64encode(payload).decode('ascii'),
        'mimeType': XLSX_MIME_TYPE,
    }
