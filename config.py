import os
import json

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _load_file_config():
    try:
        with open(os.path.join(BASE_DIR, "config.json")) as fh:
            return json.load(fh)
    except FileNotFoundError:
        with open(os.path.join(BASE_DIR, "democonfig.json")) as fh:
            return json.load(fh)


config = _load_file_config()


def _env_bool(name):
    value = os.getenv(name)
    if value is None:
        return config[name]
    return value.lower() in ('1', 'true', 'yes', 'on')


def _env_list(name):
    value = os.getenv(name)
    if value is None:
        return config[name]
    return [ext.strip().lower() for ext in value.split(',') if ext.strip()]


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', config['SECRET_KEY'])  # Signs the session cookie and download links
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', config['UPLOAD_FOLDER'])  # './uploads'
    ALLOWED_EXTENSIONS = _env_list('ALLOWED_EXTENSIONS')  # empty list accepts any extension
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', config['MAX_CONTENT_LENGTH']))

    SQLALCHEMY_DATABASE_URI = os.getenv('SQLALCHEMY_DATABASE_URI', config['SQLALCHEMY_DATABASE_URI'])  # in-memory by default
    SQLALCHEMY_TRACK_MODIFICATIONS = _env_bool('SQLALCHEMY_TRACK_MODIFICATIONS')
    BCRYPT_LOG_ROUNDS = int(os.getenv('BCRYPT_LOG_ROUNDS', config['BCRYPT_LOG_ROUNDS']))

    ADMIN_EMAIL = os.getenv('ADMIN_EMAIL', config['ADMIN_EMAIL'])
    ADMIN_NAME = os.getenv('ADMIN_NAME', config['ADMIN_NAME'])
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', config['ADMIN_PASSWORD'])
    ADMIN_PASSWORD_HASH = os.getenv('ADMIN_PASSWORD_HASH', config['ADMIN_PASSWORD_HASH'])

    CONVEX_URL = os.getenv('CONVEX_URL', config['CONVEX_URL'])  # user directory, optional

    STATS_INTERVAL = float(os.getenv('STATS_INTERVAL', config['STATS_INTERVAL']))  # seconds between socket pushes
    DOWNLOAD_LINK_MAX_AGE = int(os.getenv('DOWNLOAD_LINK_MAX_AGE', config['DOWNLOAD_LINK_MAX_AGE']))  # seconds

    LOG_LEVEL = os.getenv('LOG_LEVEL', config['LOG_LEVEL'])
    LOG_FILE = os.getenv('LOG_FILE', config['LOG_FILE'])

    DEBUG = _env_bool('DEBUG')
    PORT = int(os.getenv('PORT', config['PORT']))
