import pytest

from app import create_app
from extensions import socketio
from fileprocessor.realtime import connected_users

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'password123'


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / 'uploads'


@pytest.fixture
def app(upload_dir):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(upload_dir),
        'ALLOWED_EXTENSIONS': [],
        'BCRYPT_LOG_ROUNDS': 4,
        'ADMIN_EMAIL': ADMIN_EMAIL,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
        'ADMIN_PASSWORD_HASH': '',
        'CONVEX_URL': '',
        'STATS_INTERVAL': 60,
    })
    yield app
    connected_users.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in(client):
    resp = client.post('/api/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 302
    return client


@pytest.fixture
def socket_client(app, logged_in):
    sc = socketio.test_client(app, flask_test_client=logged_in)
    yield sc
    if sc.is_connected():
        sc.disconnect()
