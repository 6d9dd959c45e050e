"""
Pytest configuration and fixtures.
Every test gets its own SQLite file, initialised with the seed data:
host (id 1, host/host123), guest (id 2, guest/guest123) and listing 1
('Lakeview Cottage', base price 2000) owned by the host.
"""

import os
import pytest

os.environ['FLASK_ENV'] = 'test'

HOST = {'username': 'host', 'password': 'host123'}
GUEST = {'username': 'guest', 'password': 'guest123'}
LISTING_ID = 1
HOST_ID = 1
GUEST_ID = 2


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'availability_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def app_ctx(app):
    """Application context for calling models directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    """Create anonymous test client."""
    return app.test_client()


def login(client, credentials):
    response = client.post('/login', json=credentials)
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def host_client(app):
    """Test client signed in as the listing's host."""
    return login(app.test_client(), HOST)


@pytest.fixture
def guest_client(app):
    """Test client signed in as the guest."""
    return login(app.test_client(), GUEST)
