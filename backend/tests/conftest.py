"""
Pytest fixtures for UDH backend tests.

Provides test database setup, one account per role, and auth helpers.
"""

import pytest
from udh import create_app
from udh.extensions import db
from udh.models import CatalogItem, Trader
from udh.permissions import OWNER, STAFF, TECHNICAL_TEAM, WORKER
from udh.services.auth_service import create_user


PASSWORD = "secret123"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def tech_user(db_session):
    return create_user("tech", PASSWORD, role=TECHNICAL_TEAM)


@pytest.fixture(scope='function')
def owner_user(db_session):
    return create_user("owner", PASSWORD, role=OWNER)


@pytest.fixture(scope='function')
def staff_user(db_session):
    return create_user("staff", PASSWORD, role=STAFF)


@pytest.fixture(scope='function')
def worker_user(db_session):
    return create_user("worker", PASSWORD, role=WORKER)


@pytest.fixture(scope='function')
def tech_headers(client, tech_user):
    return auth_headers(get_auth_token(client, "tech", PASSWORD))


@pytest.fixture(scope='function')
def owner_headers(client, owner_user):
    return auth_headers(get_auth_token(client, "owner", PASSWORD))


@pytest.fixture(scope='function')
def staff_headers(client, staff_user):
    return auth_headers(get_auth_token(client, "staff", PASSWORD))


@pytest.fixture(scope='function')
def worker_headers(client, worker_user):
    return auth_headers(get_auth_token(client, "worker", PASSWORD))


@pytest.fixture(scope='function')
def catalog(db_session):
    """Cement on both sides of the catalog, Steel on the sales side only."""
    items = [
        CatalogItem(type="sales", product="Cement", size="50kg", price=400.0, limit=20),
        CatalogItem(type="buy", product="Cement", size="50kg", price=350.0, limit=20),
        CatalogItem(type="sales", product="Steel", size="12mm", price=75.5, limit=None),
    ]
    db_session.add_all(items)
    db_session.commit()
    return items


@pytest.fixture(scope='function')
def traders(db_session):
    rows = [
        Trader(name="Ravi", contact="9876543210", type="Customer"),
        Trader(name="Acme Supplies", contact="0442233445", type="Dealer"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
