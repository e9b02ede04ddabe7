import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from shelfwise.extensions import db
from shelfwise.models import Product
from shelfwise.services.bulk_inward import ChunkCommitError, InwardRow, RowResult, WriteBatch
from shelfwise.services.inventory_adjustment import load_product_counters

from .conftest import BUSINESS_ID


def _result(row_number=2):
    return RowResult(row=InwardRow.from_mapping({'Business Product SKU': 'SKU-200'}, row_number))


def _bump(amount):
    def apply(session):
        session.execute(
            update(Product)
            .where(Product.business_id == BUSINESS_ID, Product.sku == 'SKU-200')
            .values(inward_addition=Product.inward_addition + amount)
            .execution_options(synchronize_session=False)
        )
        return f'added {amount}'
    return apply


def _broken(session):
    raise OperationalError('UPDATE products', {}, Exception('database is locked'))


def _inward_addition():
    return load_product_counters(BUSINESS_ID, 'SKU-200').snapshot.inward_addition


def test_ceiling_below_one_row_is_refused(app):
    with app.app_context():
        with pytest.raises(ValueError):
            WriteBatch(db.session, max_operations=2)


def test_flush_if_full_commits_at_ceiling(app):
    with app.app_context():
        batch = WriteBatch(db.session, max_operations=6)
        first, second = _result(2), _result(3)

        batch.stage(first, _bump(1))
        assert batch.flush_if_full() is False
        assert first.is_pending

        batch.stage(second, _bump(2))
        assert batch.is_full
        assert batch.flush_if_full() is True

        assert first.status == 'Success' and first.message == 'added 1'
        assert second.message == 'added 2'
        assert batch.committed_chunks == 1
        assert batch.committed_rows == 2
        assert len(batch) == 0
        assert _inward_addition() == 3


def test_flush_remainder_commits_partial_chunk(app):
    with app.app_context():
        batch = WriteBatch(db.session)
        assert batch.flush_remainder() is False

        result = _result()
        batch.stage(result, _bump(5))
        assert batch.flush_if_full() is False
        assert batch.flush_remainder() is True

        assert result.status == 'Success'
        assert _inward_addition() == 5


def test_failed_chunk_persists_nothing(app):
    with app.app_context():
        batch = WriteBatch(db.session)
        results = [_result(2), _result(3), _result(4)]
        batch.stage(results[0], _bump(1))
        batch.stage(results[1], _bump(2))
        batch.stage(results[2], _broken)

        with pytest.raises(ChunkCommitError) as exc:
            batch.flush_remainder()

        assert exc.value.reason == 'OperationalError'
        assert exc.value.rows == 3
        assert [r.status for r in results] == ['Error'] * 3
        assert results[0].message == 'Not committed: OperationalError'
        assert batch.committed_chunks == 0
        assert _inward_addition() == 0


def test_failed_commit_rolls_back_the_chunk(app, monkeypatch):
    with app.app_context():
        batch = WriteBatch(db.session)
        result = _result()
        batch.stage(result, _bump(4))

        def failing_commit():
            raise OperationalError('COMMIT', {}, Exception('connection reset'))

        # patch the scoped session's current Session, which the proxy delegates to
        monkeypatch.setattr(db.session(), 'commit', failing_commit)
        with pytest.raises(ChunkCommitError):
            batch.flush_remainder()
        monkeypatch.undo()

        assert result.status == 'Error'
        assert _inward_addition() == 0


def test_dry_run_applies_then_rolls_back(app):
    with app.app_context():
        batch = WriteBatch(db.session, dry_run=True)
        result = _result()
        batch.stage(result, _bump(9))
        batch.flush_remainder()

        assert result.status == 'Success'
        assert batch.committed_chunks == 1
        assert _inward_addition() == 0


def test_non_database_error_still_rolls_back_the_chunk(app):
    with app.app_context():
        batch = WriteBatch(db.session)
        first, second = _result(2), _result(3)
        batch.stage(first, _bump(3))

        def overflowing(session):
            raise OverflowError('Python int too large to convert to SQLite INTEGER')

        batch.stage(second, overflowing)

        with pytest.raises(ChunkCommitError) as exc:
            batch.flush_remainder()

        assert exc.value.reason == 'OverflowError'
        assert first.message == 'Not committed: OverflowError'
        assert second.status == 'Error'
        assert _inward_addition() == 0
