"""Public content endpoint with locale fallback."""

import json
from flask import Blueprint, current_app, jsonify, request
from purple_publishing.errors import ContentError, NotFoundError, ValidationError
from purple_publishing.models import CmsEntry

content_bp = Blueprint('content', __name__)


def split_full_key(full_key):
    """Split ``siteKey.key`` on the first dot."""
    if not full_key or not full_key.strip() or '.' not in full_key:
        raise ValidationError('fullKey must be like siteKey.key')
    site_key, _, key = full_key.partition('.')
    return site_key, key


@content_bp.route('/<path:full_key>')
def get_content(full_key):
    """Serve an entry's stored JSON, preferring ``key.<locale>`` when asked."""
    site_key, key = split_full_key(full_key)

    entry = None
    locale = (request.args.get('locale') or '').strip().lower()
    if locale:
        entry = CmsEntry.find(site_key, f'{key}.{locale}')
    if entry is None:
        entry = CmsEntry.find(site_key, key)
    if entry is None:
        raise NotFoundError('Content not found.')

    try:
        document = json.loads(entry.json)
    except ValueError:
        current_app.logger.error('Invalid stored JSON', extra={
            'component': 'content',
            'context': {'site_key': site_key, 'key': entry.key}
        })
        raise ContentError('Stored content JSON is invalid.')
    return jsonify(document)
