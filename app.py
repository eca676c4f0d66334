import logging
import os
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import Config
from extensions import bcrypt, db, socketio
from fileprocessor import realtime  # noqa: F401  registers the socket handlers before init_app
from fileprocessor.auth import auth, seed_admin
from fileprocessor.system import SYSTEM_FEATURES, system, tech_stack
from fileprocessor.upload import upload

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(app):
    level = getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    log_file = app.config.get('LOG_FILE')
    if log_file and not any(isinstance(h, RotatingFileHandler) and h.baseFilename == os.path.abspath(log_file)
                            for h in root_logger.handlers):
        file_handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024, backupCount=3, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def register_error_handlers(app):

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return jsonify({'success': False, 'error': 'File too large'}), 413

    @app.errorhandler(HTTPException)
    def http_error(e):
        if e.code and e.code >= 400 and request.path.startswith('/api/'):
            return jsonify({'error': e.description}), e.code
        return e

    @app.errorhandler(Exception)
    def unhandled(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({'error': 'Something went wrong!'}), 500


def create_app(overrides=None):
    app = Flask(__name__, static_url_path='/static')
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    db.init_app(app)
    bcrypt.init_app(app)
    socketio.init_app(app)

    app.register_blueprint(auth)
    app.register_blueprint(upload)
    app.register_blueprint(system)

    register_error_handlers(app)

    with app.app_context():
        db.create_all()
        seed_admin(app)

    return app


if (__name__ == "__main__"):
    app = create_app()
    logger.info("ENTERPRISE FILE PROCESSOR STARTED!")
    logger.info("Server running on http://localhost:%s", app.config['PORT'])
    logger.info("Features: %d modules loaded", len(SYSTEM_FEATURES))
    logger.info("Tech Stack: %s", tech_stack())
    socketio.run(app, port=app.config['PORT'], debug=app.config['DEBUG'], allow_unsafe_werkzeug=True)
