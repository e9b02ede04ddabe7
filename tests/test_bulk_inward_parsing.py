import io

import pytest
from openpyxl import Workbook

from shelfwise.services.bulk_inward import InwardRow, normalize_column_name, parse_upload, validate_structure
from shelfwise.services.bulk_inward._rows import parse_quantity
from shelfwise.services.errors import ValidationError

HEADER = 'Warehouse Code,Zone Code,Rack Code,Shelf Code,Business Product SKU,Business Product Quantity'


def _xlsx(rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def test_column_aliases_normalize_to_canonical_names():
    assert normalize_column_name('warehouse code') == 'Warehouse Code'
    assert normalize_column_name('  ShelfCode ') == 'Shelf Code'
    assert normalize_column_name('BUSINESS PRODUCT  SKU') == 'Business Product SKU'
    assert normalize_column_name('Notes') == 'Notes'


def test_csv_rows_are_parsed_and_trimmed():
    payload = (
        '\ufeff' + HEADER + ',Notes\r\n'
        '"WH1","Z1",R1,S1,sku-1,5,fragile\r\n'
        '\r\n'
        'WH1,Z1,R1,S2,SKU-2,3\n'
    ).encode('utf-8')

    sheet = parse_upload('inward.CSV', payload)

    assert sheet.columns[-1] == 'Notes'
    assert len(sheet.rows) == 2
    assert sheet.rows[0] == {
        'Warehouse Code': 'WH1',
        'Zone Code': 'Z1',
        'Rack Code': 'R1',
        'Shelf Code': 'S1',
        'Business Product SKU': 'sku-1',
        'Business Product Quantity': '5',
        'Notes': 'fragile',
    }
    # short rows simply lack the trailing keys
    assert 'Notes' not in sheet.rows[1]


def test_csv_needs_a_data_row():
    with pytest.raises(ValidationError) as exc:
        parse_upload('inward.csv', (HEADER + '\n\n').encode())

    assert exc.value.message == 'CSV file must have at least a header row and one data row'


def test_unsupported_extension_is_rejected():
    with pytest.raises(ValidationError) as exc:
        parse_upload('inward.numbers', b'whatever')

    assert 'Excel (.xlsx, .xls) or CSV' in exc.value.message


def test_xlsx_is_read_as_text():
    payload = _xlsx([
        HEADER.split(','),
        ['WH1', 'Z1', 'R1', 'S1', 'SKU-1', 12],
        [None, None, None, None, None, None],
        ['WH1', 'Z1', 'R1', 'S2', 'SKU-2', None],
    ])

    sheet = parse_upload('inward.xlsx', payload)

    assert len(sheet.rows) == 2
    assert sheet.rows[0]['Business Product Quantity'] == '12'
    assert 'Business Product Quantity' not in sheet.rows[1]


def test_corrupt_xlsx_is_unreadable():
    with pytest.raises(ValidationError) as exc:
        parse_upload('inward.xlsx', b'not really a workbook')

    assert exc.value.message.startswith('File could not be read:')


def test_structure_reports_every_missing_column():
    sheet = parse_upload('inward.csv', b'Warehouse Code,Zone Code,Rack Code,Business Product SKU\nWH1,Z1,R1,SKU-1\n')

    with pytest.raises(ValidationError) as exc:
        validate_structure(sheet)

    assert exc.value.message == 'Invalid file structure'
    assert exc.value.details == [
        'Missing required column: Shelf Code',
        'Missing required column: Business Product Quantity',
    ]


def test_structure_rejects_header_only_sheet():
    sheet = parse_upload('inward.xlsx', _xlsx([HEADER.split(',')]))

    with pytest.raises(ValidationError) as exc:
        validate_structure(sheet)

    assert exc.value.details == ['File is empty or has no valid data rows']


@pytest.mark.parametrize('text, expected', [
    ('5', 5),
    ('12.0', 12),
    (' 7 ', 7),
    ('1.5', None),
    ('0', None),
    ('-3', None),
    ('abc', None),
    ('NaN', None),
    (None, None),
])
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


def test_row_normalizes_codes_and_keeps_extras():
    row = InwardRow.from_mapping({
        'Warehouse Code': ' wh1 ',
        'Zone Code': 'z1',
        'Rack Code': 'r1',
        'Shelf Code': 's1',
        'Business Product SKU': 'sku-1',
        'Business Product Quantity': '4',
        'Notes': 'top shelf',
    }, row_number=2)

    assert (row.warehouse_code, row.zone_code, row.rack_code, row.shelf_code) == ('WH1', 'Z1', 'R1', 'S1')
    assert row.sku == 'SKU-1'
    assert row.quantity == 4
    assert row.extras == {'Notes': 'top shelf'}
    assert row.validation_error() is None


def test_row_errors_follow_column_order():
    row = InwardRow.from_mapping({'Warehouse Code': 'WH1', 'Business Product Quantity': 'x'}, row_number=5)

    assert row.validation_error() == 'Row 5: Zone Code is required'
    assert not row.is_blank


def test_row_rejects_fractional_quantity():
    row = InwardRow.from_mapping({
        'Warehouse Code': 'WH1',
        'Zone Code': 'Z1',
        'Rack Code': 'R1',
        'Shelf Code': 'S1',
        'Business Product SKU': 'SKU-1',
        'Business Product Quantity': '2.5',
    }, row_number=3)

    assert row.validation_error() == 'Row 3: Business Product Quantity must be a positive whole number'


def test_blank_row():
    assert InwardRow.from_mapping({'Notes': 'just a note'}, row_number=9).is_blank
