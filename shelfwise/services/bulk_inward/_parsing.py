"""
Spreadsheet and CSV parsing for bulk inward uploads.

Excel files go through pandas (openpyxl for .xlsx, xlrd for .xls); CSV is
split by hand on newlines and commas, matching the template users download.
"""
from __future__ import annotations

import io
import logging
import os
import re
import zipfile
from dataclasses import dataclass, field

import pandas as pd
import xlrd

from ...utils.error_messages import ErrorMessages as EM
from ..errors import ValidationError
from ._rows import (
    PRODUCT_QUANTITY,
    PRODUCT_SKU,
    RACK_CODE,
    REQUIRED_COLUMNS,
    SHELF_CODE,
    WAREHOUSE_CODE,
    ZONE_CODE,
)

logger = logging.getLogger(__name__)

EXCEL_ENGINES = {
    '.xlsx': 'openpyxl',
    '.xls': 'xlrd',
}
SUPPORTED_EXTENSIONS = tuple(EXCEL_ENGINES) + ('.csv',)

_COLUMN_PATTERNS = (
    (re.compile(r'^warehouse\s*code$', re.IGNORECASE), WAREHOUSE_CODE),
    (re.compile(r'^zone\s*code$', re.IGNORECASE), ZONE_CODE),
    (re.compile(r'^rack\s*code$', re.IGNORECASE), RACK_CODE),
    (re.compile(r'^shelf\s*code$', re.IGNORECASE), SHELF_CODE),
    (re.compile(r'^business\s*product\s*sku$', re.IGNORECASE), PRODUCT_SKU),
    (re.compile(r'^business\s*product\s*quantity$', re.IGNORECASE), PRODUCT_QUANTITY),
)

_LINE_SPLIT = re.compile(r'\r?\n')
_EDGE_QUOTES = re.compile(r'^"|"$')


@dataclass
class ParsedSheet:
    columns: list = field(default_factory=list)
    rows: list = field(default_factory=list)


def detect_extension(filename: str | None) -> str:
    extension = os.path.splitext((filename or '').strip().lower())[1]
    if extension not in SUPPORTED_EXTENSIONS:
        raise ValidationError(EM.FILE_TYPE_INVALID)
    return extension


def normalize_column_name(name) -> str:
    text = str(name).strip()
    for pattern, canonical in _COLUMN_PATTERNS:
        if pattern.match(text):
            return canonical
    return text


def _normalize_row(raw: dict) -> dict:
    return {normalize_column_name(key): value for key, value in raw.items()}


def _read_excel(payload: bytes, engine: str) -> ParsedSheet:
    try:
        frame = pd.read_excel(
            io.BytesIO(payload),
            sheet_name=0,
            header=0,
            dtype=str,
            na_filter=False,
            engine=engine,
        )
    except (ValueError, IndexError, KeyError, OSError, zipfile.BadZipFile, xlrd.XLRDError) as exc:
        logger.warning(f"Unreadable spreadsheet upload ({engine}): {exc}")
        raise ValidationError(EM.FILE_UNREADABLE.format(reason=exc)) from exc

    # headerless columns come back as "Unnamed: N"; their cells have no key
    keep = [column for column in frame.columns if not str(column).startswith('Unnamed:')]
    frame = frame[keep]

    rows = []
    for record in frame.to_dict(orient='records'):
        cells = {key: value for key, value in record.items() if str(value).strip()}
        if cells:
            rows.append(_normalize_row(cells))
    return ParsedSheet(columns=[normalize_column_name(column) for column in keep], rows=rows)


def _split_csv_line(line: str) -> list:
    return [_EDGE_QUOTES.sub('', value.strip()) for value in line.split(',')]


def _read_csv(payload: bytes) -> ParsedSheet:
    try:
        text = payload.decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise ValidationError(EM.FILE_UNREADABLE.format(reason='file is not UTF-8 text')) from exc

    lines = [line for line in _LINE_SPLIT.split(text) if line.strip()]
    if len(lines) < 2:
        raise ValidationError(EM.CSV_TOO_SHORT)

    headers = _split_csv_line(lines[0])
    rows = []
    for line in lines[1:]:
        values = _split_csv_line(line)
        cells = {
            header: values[index]
            for index, header in enumerate(headers)
            if index < len(values) and values[index] != ''
        }
        if cells:
            rows.append(_normalize_row(cells))
    return ParsedSheet(columns=[normalize_column_name(header) for header in headers], rows=rows)


def parse_upload(filename: str, payload: bytes) -> ParsedSheet:
    """Parse an upload into normalized row mappings (header row excluded)."""
    extension = detect_extension(filename)
    if extension == '.csv':
        return _read_csv(payload)
    return _read_excel(payload, EXCEL_ENGINES[extension])


def structure_errors(sheet: ParsedSheet) -> list:
    if not sheet.rows:
        return [EM.FILE_EMPTY]
    present = {column.lower() for column in sheet.columns}
    return [
        EM.MISSING_COLUMN.format(column=column)
        for column in REQUIRED_COLUMNS
        if column.lower() not in present
    ]


def validate_structure(sheet: ParsedSheet) -> None:
    """Fail the whole upload before any row is looked at."""
    errors = structure_errors(sheet)
    if errors:
        raise ValidationError(EM.FILE_STRUCTURE_INVALID, details=errors)
