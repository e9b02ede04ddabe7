import base64
import io

import pytest
from openpyxl import load_workbook
from sqlalchemy.exc import OperationalError

from shelfwise.extensions import db
from shelfwise.models import Placement, ProductLog
from shelfwise.services.bulk_inward import BulkInwardService, XLSX_MIME_TYPE
from shelfwise.services.errors import ValidationError
from shelfwise.services.inventory_adjustment import load_product_counters

from .conftest import BUSINESS_ID

HEADER = 'Warehouse Code,Zone Code,Rack Code,Shelf Code,Business Product SKU,Business Product Quantity'


def _csv(*lines, header=HEADER):
    return io.BytesIO(('\n'.join((header,) + lines) + '\n').encode('utf-8'))


def _import(user, *lines, dry_run=False, **service_kwargs):
    service = BulkInwardService(BUSINESS_ID, user, **service_kwargs)
    return service.import_file('inward.csv', _csv(*lines), dry_run=dry_run)


def _statuses(summary):
    return [(r.row.row_number, r.status) for r in summary.results]


def test_missing_column_rejects_whole_file(app, test_user):
    with app.app_context():
        header = 'Warehouse Code,Zone Code,Rack Code,Business Product SKU,Business Product Quantity'
        service = BulkInwardService(BUSINESS_ID, test_user)

        with pytest.raises(ValidationError) as exc:
            service.import_file('inward.csv', _csv('WH1,Z1,R1,SKU-200,5', header=header))

        assert exc.value.details == ['Missing required column: Shelf Code']
        assert Placement.query.count() == 0
        assert ProductLog.query.count() == 0


def test_mixed_rows_are_classified_independently(app, test_user):
    with app.app_context():
        summary = _import(
            test_user,
            'WH1,Z1,R1,S1,SKU-200,5',
            'WH1,Z2,R2,S-STALE,SKU-200,4',
            'WH1,Z1,R1,S2,SKU-200,',
        )

        assert summary.to_dict()['summary'] == {'total': 3, 'success': 1, 'skipped': 1, 'errors': 1}
        assert _statuses(summary) == [(2, 'Success'), (3, 'Skipped'), (4, 'Error')]

        assert summary.results[0].message == (
            'Created placement "SKU-200_S1" for business product SKU-200 in shelf "S1", '
            'rack "R1", zone "Z1", warehouse "WH1".'
        )
        assert summary.results[1].message.startswith('Shelf path mismatch:')
        assert summary.results[2].message == 'Row 4: Business Product Quantity is required'

        placements = Placement.query.all()
        assert [(p.id, p.quantity) for p in placements] == [('SKU-200_S1', 5)]
        assert placements[0].last_movement_reference == 'bulk_inward:inward.csv'
        assert load_product_counters(BUSINESS_ID, 'SKU-200').snapshot.inward_addition == 5


def test_repeated_pairs_share_one_placement_and_chain_logs(app, test_user):
    with app.app_context():
        summary = _import(
            test_user,
            'wh1,z1,r1,s1,sku-200,5',
            'WH1,Z1,R1,S1,SKU-200,7',
        )

        assert summary.success == 2
        assert summary.results[1].message.startswith('Added 7 units to placement "SKU-200_S1"')
        assert db.session.get(Placement, (BUSINESS_ID, 'SKU-200_S1')).quantity == 12

        logs = ProductLog.query.order_by(ProductLog.performed_at).all()
        assert [(log.changes[0]['oldValue'], log.changes[0]['newValue']) for log in logs] == [(0, 5), (5, 12)]
        assert {log.action for log in logs} == {'bulk_inward'}
        assert logs[0].log_metadata['source'] == 'bulk_inward'
        assert logs[0].placement['rackName'] == 'Rack 1'


def test_unresolved_rows_are_skipped_without_writes(app, test_user):
    with app.app_context():
        summary = _import(
            test_user,
            'WH9,Z1,R1,S1,SKU-200,1',
            'WH1,Z1,R1,S-GONE,SKU-200,1',
            'WH1,Z1,R1,S1,SKU-404,1',
            'WH1,Z2,R2,S-STALE,SKU-200,1',
        )

        assert [r.status for r in summary.results] == ['Skipped'] * 4
        assert [r.message for r in summary.results[:3]] == [
            'Warehouse entity "WH9" does not exist',
            'Shelf entity "S-GONE" does not exist',
            'Business Product "SKU-404" does not exist',
        ]
        assert Placement.query.count() == 0
        assert ProductLog.query.count() == 0
        assert load_product_counters(BUSINESS_ID, 'SKU-200').snapshot.inward_addition == 0


def test_blank_rows_are_not_counted(app, test_user):
    with app.app_context():
        service = BulkInwardService(BUSINESS_ID, test_user)
        summary = service.import_file('inward.csv', _csv(
            'WH1,Z1,R1,S1,SKU-200,2,',
            ',,,,,,only a note',
            'WH1,Z1,R1,S2,SKU-200,3,',
            header=HEADER + ',Notes',
        ))

        assert summary.total == 2
        assert _statuses(summary) == [(2, 'Success'), (4, 'Success')]


def test_small_windows_and_chunks_cover_every_row(app, test_user):
    with app.app_context():
        lines = [f'WH1,Z1,R1,{shelf},{sku},1' for sku in ('SKU-100', 'SKU-200', 'SKU-300') for shelf in ('S1', 'S2')]
        summary = _import(test_user, *lines, max_operations=6, resolution_window=4)

        assert summary.success == 6
        assert summary.committed_chunks == 3
        assert Placement.query.count() == 6
        assert load_product_counters(BUSINESS_ID, 'SKU-100').snapshot.inward_addition == 22


def test_dry_run_reports_but_saves_nothing(app, test_user):
    with app.app_context():
        summary = _import(test_user, 'WH1,Z1,R1,S1,SKU-200,5', 'WH1,Z1,R1,S9,SKU-200,5', dry_run=True)

        assert _statuses(summary) == [(2, 'Success'), (3, 'Skipped')]
        assert summary.results[0].message == 'Dry run: placement "SKU-200_S1" would receive 5 units'
        payload = summary.to_dict()
        assert payload['dryRun'] is True
        assert payload['message'] == 'Bulk inward dry run completed; nothing was saved'
        assert Placement.query.count() == 0
        assert ProductLog.query.count() == 0
        assert load_product_counters(BUSINESS_ID, 'SKU-200').snapshot.inward_addition == 0


def test_failed_commit_aborts_remaining_rows(app, test_user, monkeypatch):
    with app.app_context():
        session = db.session()
        real_commit = session.commit
        calls = []

        def flaky_commit():
            calls.append(1)
            if len(calls) == 2:
                raise OperationalError('COMMIT', {}, Exception('connection reset'))
            real_commit()

        monkeypatch.setattr(session, 'commit', flaky_commit)
        summary = _import(
            test_user,
            'WH1,Z1,R1,S1,SKU-200,1',
            'WH1,Z1,R1,S2,SKU-200,2',
            'WH1,Z1,R1,S1,SKU-300,3',
            max_operations=3,
        )
        monkeypatch.undo()

        assert summary.aborted is True
        assert _statuses(summary) == [(2, 'Success'), (3, 'Error'), (4, 'Error')]
        assert summary.results[1].message == 'Not committed: OperationalError'
        assert summary.results[2].message == 'Not processed: import aborted after a failed commit'

        payload = summary.to_dict()
        assert payload['success'] is False
        assert payload['committedChunks'] == 1
        assert payload['summary'] == {'total': 3, 'success': 1, 'skipped': 0, 'errors': 2}

        assert [p.id for p in Placement.query.all()] == ['SKU-200_S1']
        assert ProductLog.query.count() == 1


def test_result_workbook_mirrors_rows(app, test_user):
    with app.app_context():
        header = HEADER + ',Notes'
        service = BulkInwardService(BUSINESS_ID, test_user)
        summary = service.import_file(
            'inward.csv',
            _csv('WH1,Z1,R1,S1,SKU-200,5,fragile', 'WH1,Z1,R1,S1,SKU-404,1', header=header),
        )

        result_file = summary.to_dict()['resultFile']
        assert result_file['mimeType'] == XLSX_MIME_TYPE
        assert result_file['name'].startswith('bulk-inward-results-')
        assert result_file['name'].endswith('.xlsx')

        workbook = load_workbook(io.BytesIO(base64.b64decode(result_file['data'])))
        sheet = workbook['Inward Results']
        rows = list(sheet.iter_rows(values_only=True))

        assert rows[0][-3:] == ('Notes', 'Status', 'Message')
        assert rows[1][-3] == 'fragile'
        assert rows[1][-2] == 'Success'
        assert rows[2][-2] == 'Skipped'
        assert sheet.freeze_panes == 'A2'
        assert sheet.cell(row=2, column=len(rows[0]) - 1).fill.fgColor.rgb == 'FFD4EDDA'


def test_oversized_quantity_is_a_row_error(app, test_user):
    with app.app_context():
        summary = _import(
            test_user,
            'WH1,Z1,R1,S1,SKU-200,5',
            'WH1,Z1,R1,S2,SKU-200,99999999999999999999',
            'WH1,Z1,R1,S1,SKU-300,1',
            max_operations=3,
        )

        assert summary.aborted is False
        assert _statuses(summary) == [(2, 'Success'), (3, 'Error'), (4, 'Success')]
        assert summary.results[1].message == 'Row 3: Business Product Quantity must not exceed 2147483647'
        assert summary.committed_chunks == 2
        assert sorted(p.id for p in Placement.query.all()) == ['SKU-200_S1', 'SKU-300_S1']
        assert ProductLog.query.count() == 2


def test_empty_lines_do_not_take_a_row_number(app, test_user):
    with app.app_context():
        summary = _import(
            test_user,
            'WH1,Z1,R1,S1,SKU-200,5',
            '',
            ',,,,,',
            'WH1,Z1,R1,S2,SKU-200,',
        )

        assert _statuses(summary) == [(2, 'Success'), (3, 'Error')]
        assert summary.results[1].message == 'Row 3: Business Product Quantity is required'
