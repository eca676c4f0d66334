"""
Auth blueprint tests.
Run: pytest tests/test_auth.py -v
"""
from flask_bcrypt import generate_password_hash

from app import create_app
from extensions import bcrypt
from models import User
from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD


def test_admin_is_seeded(app):
    with app.app_context():
        admin = User.query.filter_by(email=ADMIN_EMAIL).one()
        assert admin.role == 'admin'
        assert bcrypt.check_password_hash(admin.password_hash, ADMIN_PASSWORD)


def test_seeded_admin_uses_configured_hash(upload_dir):
    known_hash = generate_password_hash('s3cret', 4).decode('utf-8')
    app = create_app({
        'TESTING': True,
        'UPLOAD_FOLDER': str(upload_dir),
        'BCRYPT_LOG_ROUNDS': 4,
        'ADMIN_PASSWORD_HASH': known_hash,
        'CONVEX_URL': '',
    })
    resp = app.test_client().post('/api/login', data={'email': ADMIN_EMAIL, 'password': 's3cret'})
    assert resp.status_code == 302


def test_login_sets_session_and_redirects(client):
    resp = client.post('/api/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/')
    assert 'session=' in resp.headers.get('Set-Cookie', '')

    me = client.get('/api/me')
    assert me.status_code == 200
    body = me.get_json()
    assert body['email'] == ADMIN_EMAIL
    assert body['role'] == 'admin'
    assert body['directory_id'] is None


def test_login_accepts_json(client):
    resp = client.post('/api/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert resp.status_code == 302


def test_login_updates_last_login(app, client):
    client.post('/api/login', data={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    with app.app_context():
        assert User.query.filter_by(email=ADMIN_EMAIL).one().last_login is not None


def test_login_wrong_password(client):
    resp = client.post('/api/login', data={'email': ADMIN_EMAIL, 'password': 'nope'})
    assert resp.status_code == 400
    assert b'Invalid credentials' in resp.data
    assert client.get('/api/me').status_code == 401


def test_login_unknown_email(client):
    resp = client.post('/api/login', data={'email': 'ghost@example.com', 'password': ADMIN_PASSWORD})
    assert resp.status_code == 400
    assert b'Invalid credentials' in resp.data


def test_register_creates_user_and_logs_in(app, client):
    resp = client.post('/api/register', data={
        'name': 'Jo', 'email': 'jo@example.com', 'password': 'hunter22',
    })
    assert resp.status_code == 302

    me = client.get('/api/me').get_json()
    assert me['name'] == 'Jo'
    assert me['role'] == 'user'

    with app.app_context():
        user = User.query.filter_by(email='jo@example.com').one()
        assert user.password_hash != 'hunter22'
        assert bcrypt.check_password_hash(user.password_hash, 'hunter22')


def test_registered_user_can_log_in_again(client):
    client.post('/api/register', data={'name': 'Jo', 'email': 'jo@example.com', 'password': 'hunter22'})
    client.get('/logout')
    resp = client.post('/api/login', data={'email': 'jo@example.com', 'password': 'hunter22'})
    assert resp.status_code == 302


def test_register_existing_email(client):
    resp = client.post('/api/register', data={
        'name': 'Other', 'email': ADMIN_EMAIL, 'password': 'whatever',
    })
    assert resp.status_code == 400
    assert b'User already exists' in resp.data


def test_register_missing_fields(client):
    resp = client.post('/api/register', data={'email': 'x@example.com'})
    assert resp.status_code == 400
    assert b'required' in resp.data


def test_logout_clears_session(logged_in):
    resp = logged_in.get('/logout')
    assert resp.status_code == 302
    assert resp.headers['Location'].endswith('/login')
    assert logged_in.get('/api/me').status_code == 401


def test_me_requires_auth(client):
    resp = client.get('/api/me')
    assert resp.status_code == 401
    assert resp.get_json() == {'error': 'Unauthorized'}


def test_pages_render(client):
    assert b'<form' in client.get('/login').data
    assert b'name="name"' in client.get('/register').data


def test_login_with_non_string_fields(client):
    resp = client.post('/api/login', json={'email': 5, 'password': ['x']})
    assert resp.status_code == 400
    assert b'Invalid credentials' in resp.data


def test_register_with_non_string_fields(client):
    resp = client.post('/api/register', json={'name': {'a': 1}, 'email': 7, 'password': 'hunter22'})
    assert resp.status_code == 400
    assert b'required' in resp.data
