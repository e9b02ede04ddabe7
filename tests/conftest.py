"""
Pytest configuration and shared fixtures for shelfwise tests.
"""
import os
import tempfile

import pytest

from shelfwise import create_app
from shelfwise.extensions import db
from shelfwise.models import Business, BusinessMember, Product, Rack, Shelf, User, Warehouse, Zone

BUSINESS_ID = 'biz-acme'
OTHER_BUSINESS_ID = 'biz-globex'


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
        'RATELIMIT_ENABLED': False,
        'LOG_LEVEL': 'WARNING',
    })

    with app.app_context():
        db.create_all()
        _create_test_data()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield


@pytest.fixture
def test_user(app):
    """Active member of the Acme business."""
    with app.app_context():
        user = User.query.filter_by(email='alice@example.com').first()
        db.session.expunge(user)
        return user


@pytest.fixture
def login(app, client):
    """Log the user with ``email`` into the test client's session."""
    def _login(email='alice@example.com'):
        with app.app_context():
            user_id = User.query.filter_by(email=email).first().id
        with client.session_transaction() as sess:
            sess['_user_id'] = str(user_id)
            sess['_fresh'] = True
        return user_id

    return _login


def _create_test_data():
    """Two businesses, three users and one warehouse tree with a stale shelf."""
    acme = Business(id=BUSINESS_ID, name='Acme Storage')
    globex = Business(id=OTHER_BUSINESS_ID, name='Globex')
    db.session.add_all([acme, globex])

    alice = User(email='alice@example.com', name='Alice')
    bob = User(email='bob@example.com', name='Bob')
    carol = User(email='carol@example.com', name='Carol')
    db.session.add_all([alice, bob, carol])
    db.session.flush()

    db.session.add_all([
        BusinessMember(business_id=BUSINESS_ID, user_id=alice.id, role='owner', status='active'),
        BusinessMember(business_id=OTHER_BUSINESS_ID, user_id=bob.id, role='owner', status='active'),
        BusinessMember(business_id=BUSINESS_ID, user_id=carol.id, role='member', status='invited'),
    ])

    db.session.add(Warehouse(business_id=BUSINESS_ID, code='WH1', name='Main Warehouse'))
    db.session.add_all([
        Zone(business_id=BUSINESS_ID, code='Z1', name='Zone A', warehouse_id='WH1'),
        Zone(business_id=BUSINESS_ID, code='Z2', name='Zone B', warehouse_id='WH1'),
    ])
    db.session.add_all([
        Rack(business_id=BUSINESS_ID, code='R1', name='Rack 1', warehouse_id='WH1', zone_id='Z1'),
        # R2 was moved to Z1; S-STALE below still believes it lives in Z2
        Rack(business_id=BUSINESS_ID, code='R2', name='Rack 2', warehouse_id='WH1', zone_id='Z1'),
    ])
    db.session.add_all([
        Shelf(business_id=BUSINESS_ID, code='S1', name='Shelf 1', warehouse_id='WH1', zone_id='Z1', rack_id='R1'),
        Shelf(business_id=BUSINESS_ID, code='S2', name='Shelf 2', warehouse_id='WH1', zone_id='Z1', rack_id='R1'),
        Shelf(business_id=BUSINESS_ID, code='S-STALE', name='Stale Shelf', warehouse_id='WH1', zone_id='Z2', rack_id='R2'),
        Shelf(business_id=BUSINESS_ID, code='S-GONE', name='Removed Shelf', warehouse_id='WH1', zone_id='Z1',
              rack_id='R1', is_deleted=True),
    ])

    db.session.add_all([
        Product(business_id=BUSINESS_ID, sku='SKU-100', name='Blue Widget',
                opening_stock=100, inward_addition=20, deduction=10),
        Product(business_id=BUSINESS_ID, sku='SKU-200', name='Red Widget'),
        Product(business_id=BUSINESS_ID, sku='SKU-300', name='Green Widget', opening_stock=100),
        Product(business_id=OTHER_BUSINESS_ID, sku='SKU-100', name='Globex Widget', opening_stock=5),
    ])
    db.session.commit()
