"""CMS read and upsert endpoints."""

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user
from purple_publishing.errors import NotFoundError, ValidationError
from purple_publishing.models import CmsEntry, ROLE_ADMIN, ROLE_EDITOR
from purple_publishing.utils.decorators import roles_required
from purple_publishing.utils.http import json_body

cms_bp = Blueprint('cms', __name__)


def _require_keys(site_key, key):
    if not isinstance(site_key, str) or not site_key.strip() \
            or not isinstance(key, str) or not key.strip():
        raise ValidationError('siteKey and key are required.')


@cms_bp.route('', methods=['GET'])
def get_entry():
    """Public read of one raw entry."""
    site_key = request.args.get('siteKey')
    key = request.args.get('key')
    _require_keys(site_key, key)

    entry = CmsEntry.find(site_key, key)
    if entry is None:
        raise NotFoundError('Content not found.')
    return jsonify(entry.to_dict())


@cms_bp.route('', methods=['PUT'])
@roles_required(ROLE_ADMIN, ROLE_EDITOR)
def upsert_entry():
    """Create or replace an entry. The JSON payload is stored as given."""
    data = json_body()
    site_key = data.get('siteKey')
    key = data.get('key')
    _require_keys(site_key, key)

    json_text = data.get('json')
    if json_text is not None and not isinstance(json_text, str):
        raise ValidationError('json must be a string.')

    entry = CmsEntry.upsert(site_key, key, json_text)
    current_app.logger.info('CMS entry saved', extra={
        'component': 'cms',
        'context': {'site_key': site_key, 'key': key, 'user_id': current_user.id}
    })
    return jsonify(entry.to_dict())
