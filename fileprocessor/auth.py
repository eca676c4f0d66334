import logging
from datetime import datetime, timezone
from functools import wraps

from flask import Blueprint, current_app, jsonify, redirect, render_template, request, session, url_for

from extensions import bcrypt, db
from fileprocessor.directory import DirectoryError, get_directory
from models import User

logger = logging.getLogger(__name__)

auth = Blueprint('auth', __name__)


def require_auth(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not session.get('user'):
            return jsonify({'error': 'Unauthorized'}), 401
        return view(*args, **kwargs)
    return wrapped


def _form_data():
    # Browser forms post urlencoded bodies, API clients post JSON.
    return request.get_json(silent=True) or request.form


def _field(data, name):
    value = data.get(name)
    return value if isinstance(value, str) else ''


def _now():
    return datetime.now(timezone.utc)


def seed_admin(app):
    """Insert the configured admin account unless it already exists."""
    email = app.config['ADMIN_EMAIL']
    if User.query.filter_by(email=email).first():
        return
    password_hash = app.config.get('ADMIN_PASSWORD_HASH') or \
        bcrypt.generate_password_hash(app.config['ADMIN_PASSWORD']).decode('utf-8')
    db.session.add(User(name=app.config['ADMIN_NAME'], email=email,
                        password_hash=password_hash, role='admin'))
    db.session.commit()
    logger.info("Seeded admin account %s", email)


@auth.route('/login', methods=['GET'])
def login_page():
    return render_template('login.html', title='Login')


@auth.route('/register', methods=['GET'])
def register_page():
    return render_template('register.html', title='Register')


@auth.route('/api/register', methods=['POST'])
def register():
    data = _form_data()
    name = _field(data, 'name').strip()
    email = _field(data, 'email').strip()
    password = _field(data, 'password')

    if not name or not email or not password:
        return render_template('register.html', title='Register',
                               error='Name, email and password are required'), 400

    if User.query.filter_by(email=email).first():
        return render_template('register.html', title='Register', error='User already exists'), 400

    hashed_password = bcrypt.generate_password_hash(password).decode('utf-8')

    directory_id = None
    directory = get_directory(current_app)
    if directory is not None:
        try:
            directory_id = directory.create_user(name, email, 'user', _now().isoformat())
        except DirectoryError:
            logger.exception("Could not mirror new user %s to the directory", email)

    new_user = User(name=name, email=email, password_hash=hashed_password,
                    role='user', directory_id=directory_id, last_login=_now())
    db.session.add(new_user)
    db.session.commit()

    session['user'] = new_user.session_payload()
    logger.info("Registered user %s", email)
    return redirect(url_for('system.dashboard'))


@auth.route('/api/login', methods=['POST'])
def login():
    data = _form_data()
    email = _field(data, 'email').strip()
    password = _field(data, 'password')

    user = User.query.filter_by(email=email).first()
    if not user or not bcrypt.check_password_hash(user.password_hash, password):
        logger.info("Failed login for %s", email)
        return render_template('login.html', title='Login', error='Invalid credentials'), 400

    logged_in_at = _now()
    user.last_login = logged_in_at
    db.session.commit()

    if user.directory_id:
        directory = get_directory(current_app)
        if directory is not None:
            try:
                directory.update_last_login(user.directory_id, logged_in_at.isoformat())
            except DirectoryError:
                logger.exception("Could not update last login for %s in the directory", email)

    session['user'] = user.session_payload()
    logger.info("User %s logged in", email)
    return redirect(url_for('system.dashboard'))


@auth.route('/logout', methods=['GET'])
def logout():
    user = session.get('user')
    session.clear()
    if user:
        logger.info("User %s logged out", user['email'])
    return redirect(url_for('auth.login_page'))


@auth.route('/api/me', methods=['GET'])
@require_auth
def me():
    return jsonify(session['user'])
