"""Upload storage on the public and private upload trees."""

import os
import shutil
import uuid
from flask import current_app
from slugify import slugify
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

SUBMISSIONS_DIR = 'submissions'
DEFAULT_PUBLIC_FOLDER = 'cms'
DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def _random_name(filename):
    """Random stored name keeping the (sanitised) extension."""
    ext = os.path.splitext(secure_filename(filename or ''))[1].lower()
    return f'{uuid.uuid4().hex}{ext}'


def _private_root():
    return current_app.config['PRIVATE_UPLOAD_FOLDER']


def submission_dir(storage_key):
    return os.path.join(_private_root(), SUBMISSIONS_DIR, storage_key)


def save_submission_file(storage_key, file):
    """Save one attachment; returns (relative_path, size)."""
    directory = submission_dir(storage_key)
    os.makedirs(directory, exist_ok=True)

    stored_name = _random_name(file.filename)
    full_path = os.path.join(directory, stored_name)
    file.save(full_path)
    return f'{SUBMISSIONS_DIR}/{storage_key}/{stored_name}', os.path.getsize(full_path)


def file_size(file):
    """Byte size of an uploaded file without consuming its stream."""
    stream = file.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size


def resolve_private_path(relative_path):
    """Absolute path of a stored attachment, or None if missing or unsafe."""
    full_path = safe_join(_private_root(), *relative_path.split('/'))
    if full_path is None or not os.path.isfile(full_path):
        return None
    return full_path


def remove_submission_dir(storage_key):
    """Remove a submission's attachment directory. Returns False on failure."""
    directory = submission_dir(storage_key)
    if not os.path.isdir(directory):
        return True
    try:
        shutil.rmtree(directory)
    except OSError:
        current_app.logger.warning('Could not remove attachment directory %s', directory,
                                   exc_info=True, extra={'component': 'storage'})
        return False
    return True


def clean_folder(folder):
    """Slugify each segment of a public upload folder."""
    segments = [slugify(part) for part in (folder or '').replace('\\', '/').split('/')]
    segments = [part for part in segments if part]
    return '/'.join(segments) or DEFAULT_PUBLIC_FOLDER


def save_public_file(file, folder):
    """Save a file under the public upload tree and return its URL."""
    folder = clean_folder(folder)
    directory = os.path.join(current_app.config['UPLOAD_FOLDER'], *folder.split('/'))
    os.makedirs(directory, exist_ok=True)

    stored_name = _random_name(file.filename)
    file.save(os.path.join(directory, stored_name))
    return f'/uploads/{folder}/{stored_name}'
