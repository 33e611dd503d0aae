"""Public CMS media uploads."""

from flask import Blueprint, current_app, jsonify, request, send_from_directory
from flask_login import current_user
from purple_publishing.errors import ValidationError
from purple_publishing.utils.decorators import admin_required
from purple_publishing.utils.storage import file_size, save_public_file

uploads_bp = Blueprint('uploads', __name__)


@uploads_bp.route('/api/uploads/file', methods=['POST'])
@admin_required
def upload_file():
    """Store a file under the public tree and return its URL."""
    file = request.files.get('file')
    if file is None or not file.filename or file_size(file) == 0:
        raise ValidationError('file is required.')

    url = save_public_file(file, request.form.get('folder'))
    current_app.logger.info('Public file uploaded', extra={
        'component': 'uploads',
        'context': {'url': url, 'user_id': current_user.id}
    })
    return jsonify({'url': url})


@uploads_bp.route('/uploads/<path:filename>')
def public_file(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
