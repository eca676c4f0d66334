import logging
import os
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, render_template, session
from flask_cors import CORS

from fileprocessor.realtime import connected_users, memory_usage, uptime
from fileprocessor.upload import list_uploads

logger = logging.getLogger(__name__)

system = Blueprint('system', __name__)
cors = CORS(system)

SYSTEM_FEATURES = ['CLI Interface', 'Web Dashboard', 'File Processing', 'Real-time Updates']
TECHNOLOGIES = ['Python', 'Flask', 'Jinja2', 'Socket.IO']


def create_welcome_message(username='Guest'):
    timestamp = datetime.now(timezone.utc).isoformat()
    return f"Welcome {username}! Server started at {timestamp}"


def feature_list():
    return os.linesep.join(f"{i}. {feature}" for i, feature in enumerate(SYSTEM_FEATURES, start=1))


def tech_stack():
    return ' • '.join(TECHNOLOGIES)


def _timestamp():
    return datetime.now(timezone.utc).isoformat()


@system.route('/', methods=['GET'])
def dashboard():
    user = session.get('user') or {}
    return render_template('dashboard.html',
                           title='Enterprise File Processor',
                           welcome=create_welcome_message(user.get('name', 'Guest')),
                           features=feature_list(),
                           tech_stack=tech_stack(),
                           user=session.get('user'))


@system.route('/api/system', methods=['GET'])
def system_info():
    return jsonify({
        'status': 'running',
        'uptime': uptime(),
        'features': SYSTEM_FEATURES,
        'technologies': TECHNOLOGIES,
        'timestamp': _timestamp(),
    })


@system.route('/api/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'uptime': uptime(), 'timestamp': _timestamp()})


@system.route('/api/stats', methods=['GET'])
def stats():
    try:
        uploads = len(list_uploads(current_app.config['UPLOAD_FOLDER']))
    except OSError:
        logger.warning("Could not count uploads in %s", current_app.config['UPLOAD_FOLDER'], exc_info=True)
        uploads = None
    return jsonify({
        'uptime': uptime(),
        'memory': memory_usage(),
        'connected_users': len(connected_users),
        'uploads': uploads,
    })
