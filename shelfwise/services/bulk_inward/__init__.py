"""
Bulk inward pipeline: spreadsheet in, placements and counters out.

Usage:
    from shelfwise.services.bulk_inward import BulkInwardService

    summary = BulkInwardService(business_id, user).import_file(name, stream)
"""

from ._batching import ChunkCommitError, WriteBatch
from ._parsing import ParsedSheet, normalize_column_name, parse_upload, validate_structure
from ._results import XLSX_MIME_TYPE, build_result_workbook
from ._rows import REQUIRED_COLUMNS, InwardRow, RowResult
from ._service import BulkInwardService, ImportSummary

__all__ = [
    'BulkInwardService',
    'ImportSummary',
    'WriteBatch',
    'ChunkCommitError',
    'ParsedSheet',
    'parse_upload',
    'validate_structure',
    'normalize_column_name',
    'build_result_workbook',
    'XLSX_MIME_TYPE',
    'REQUIRED_COLUMNS',
    'InwardRow',
    'RowResult',
]
