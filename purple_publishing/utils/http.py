"""Request parsing helpers shared by the API blueprints."""

from flask import request
from purple_publishing.errors import ValidationError
from purple_publishing.utils.storage import file_size

TRUE_VALUES = {'true', '1', 'yes', 'y', 'on'}
FALSE_VALUES = {'false', '0', 'no', 'n', 'off'}


def json_body():
    """The request's JSON object, or an empty dict."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text(value):
    """Trimmed string for a loosely typed input value."""
    if value is None:
        return ''
    return str(value).strip()


def parse_bool(value, name):
    """Parse a boolean query or body value; None when absent."""
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValidationError(f'{name} must be a boolean.')


def form_value(name):
    """Form field looked up case-insensitively."""
    if name in request.form:
        return request.form.get(name)
    for key in request.form:
        if key.lower() == name.lower():
            return request.form.get(key)
    return None


def form_files(name):
    """All uploads under ``name`` (case-insensitive), skipping empty inputs."""
    files = []
    for key in request.files:
        if key.lower() == name.lower():
            files.extend(request.files.getlist(key))
    return [f for f in files if f and f.filename and file_size(f) > 0]
