import logging
import os
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, render_template, request, send_from_directory, session, url_for
from flask_cors import CORS
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.utils import secure_filename

from fileprocessor.auth import require_auth
from fileprocessor.realtime import notify_upload

logger = logging.getLogger(__name__)

upload = Blueprint('upload', __name__)
cors = CORS(upload)


def allowed_file(filename):
    allowed = current_app.config.get('ALLOWED_EXTENSIONS') or []
    if not allowed:
        return True
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in allowed


def stored_filename(original):
    """``<ms since epoch>-<sanitised name>``, the on-disk name of an upload."""
    return f"{int(time.time() * 1000)}-{secure_filename(original)}"


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'])


def _upload_folder():
    return current_app.config['UPLOAD_FOLDER']


def _iso(ts):
    return datetime.fromtimestamp(ts, timezone.utc).isoformat()


def list_uploads(folder):
    """Regular files in ``folder``, newest first. A missing folder is empty."""
    if not os.path.isdir(folder):
        return []
    files = []
    with os.scandir(folder) as entries:
        for entry in entries:
            if not entry.is_file():
                continue
            st = entry.stat()
            files.append((st.st_mtime, {
                'name': entry.name,
                'size': st.st_size,
                'created': _iso(st.st_ctime),
                'modified': _iso(st.st_mtime),
            }))
    files.sort(key=lambda f: f[0], reverse=True)
    return [info for _, info in files]


@upload.route('/upload', methods=['GET'])
@require_auth
def upload_page():
    return render_template('upload.html', title='File Upload')


@upload.route('/upload', methods=['POST'])
@require_auth
def upload_file():
    if 'file' not in request.files:
        return jsonify({'success': False, 'error': 'No file part'}), 400

    file = request.files['file']
    if file.filename == '':
        return jsonify({'success': False, 'error': 'No selected file'}), 400

    if not allowed_file(file.filename):
        return jsonify({'success': False, 'error': 'File type not allowed'}), 400

    folder = _upload_folder()
    os.makedirs(folder, exist_ok=True)
    filename = stored_filename(file.filename)
    path = os.path.join(folder, filename)
    file.save(path)

    uploader = session['user']['email']
    logger.info("%s uploaded %s", uploader, filename)
    notify_upload(filename, uploader)

    return jsonify({
        'success': True,
        'file': {
            'fieldname': 'file',
            'originalname': file.filename,
            'filename': filename,
            'path': path,
            'size': os.path.getsize(path),
            'mimetype': file.mimetype,
        },
    })


@upload.route('/api/files', methods=['GET'])
@require_auth
def list_files():
    try:
        files = list_uploads(_upload_folder())
    except OSError:
        logger.exception("Unable to read upload directory %s", _upload_folder())
        return jsonify({'error': 'Unable to read upload directory'}), 500
    return jsonify({'files': files, 'count': len(files)})


@upload.route('/api/files/<filename>/link', methods=['GET'])
@require_auth
def download_link(filename):
    if not os.path.isfile(os.path.join(_upload_folder(), secure_filename(filename))):
        return jsonify({'error': 'File not found'}), 404

    token = _serializer().dumps(secure_filename(filename), salt='file-download')
    link = url_for('upload.secure_download', token=token, _external=True)
    return jsonify({'download-link': link, 'expires_in': current_app.config['DOWNLOAD_LINK_MAX_AGE']})


@upload.route('/download/<token>', methods=['GET'])
@require_auth
def secure_download(token):
    try:
        filename = _serializer().loads(token, salt='file-download',
                                       max_age=current_app.config['DOWNLOAD_LINK_MAX_AGE'])
    except (BadSignature, SignatureExpired):
        return jsonify({'error': 'Invalid or expired link'}), 400

    if not os.path.isfile(os.path.join(_upload_folder(), filename)):
        return jsonify({'error': 'File not found'}), 404
    return send_from_directory(os.path.abspath(_upload_folder()), filename, as_attachment=True)
