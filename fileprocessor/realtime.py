"""
Socket.IO live stats.

Each connection gets an immediate ``stats`` snapshot followed by one every
``STATS_INTERVAL`` seconds until it disconnects. Connection counts are
broadcast as ``user_count`` and new uploads as ``file_uploaded``.
"""
import logging
import time
from datetime import datetime, timezone

import psutil
from flask import current_app, request, session

from extensions import socketio

logger = logging.getLogger(__name__)

STARTED_AT = psutil.Process().create_time()

# sid -> {name, email, connected_at}
connected_users = {}


def uptime():
    return time.time() - STARTED_AT


def memory_usage():
    info = psutil.Process().memory_info()
    return {'rss': info.rss, 'vms': info.vms}


def process_stats():
    return {
        'uptime': uptime(),
        'memory': memory_usage(),
        'connected_users': len(connected_users),
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }


def _push_stats(sid, interval):
    while True:
        socketio.sleep(interval)
        if sid not in connected_users:
            break
        socketio.emit('stats', process_stats(), to=sid)


@socketio.on('connect')
def handle_connect(auth=None):
    user = session.get('user') or {}
    sid = request.sid
    connected_users[sid] = {
        'name': user.get('name', 'Guest'),
        'email': user.get('email'),
        'connected_at': datetime.now(timezone.utc).isoformat(),
    }
    logger.info("Socket %s connected (%s), %d online", sid, connected_users[sid]['name'], len(connected_users))

    socketio.emit('stats', process_stats(), to=sid)
    socketio.emit('user_count', {'count': len(connected_users)})
    socketio.start_background_task(_push_stats, sid, current_app.config['STATS_INTERVAL'])


@socketio.on('disconnect')
def handle_disconnect(*args):
    sid = request.sid
    connected_users.pop(sid, None)
    logger.info("Socket %s disconnected, %d online", sid, len(connected_users))
    socketio.emit('user_count', {'count': len(connected_users)})


def notify_upload(filename, uploaded_by):
    socketio.emit('file_uploaded', {'filename': filename, 'uploaded_by': uploaded_by})
