import io
from types import SimpleNamespace

import pytest

from purple_publishing import create_app
from purple_publishing.extensions import db, mail
from purple_publishing.models import User, ROLE_ADMIN, ROLE_EDITOR, ROLE_INBOX
from purple_publishing.utils.security import issue_token


@pytest.fixture
def app(tmp_path):
    app = create_app('testing', overrides={
        'UPLOAD_FOLDER': str(tmp_path / 'public'),
        'PRIVATE_UPLOAD_FOLDER': str(tmp_path / 'private'),
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(app):
    with mail.record_messages() as messages:
        yield messages


def make_user(app, email, role, password='secret123', is_active=True):
    """Create an account; returns its id, email and bearer headers."""
    with app.app_context():
        user = User(email=email, role=role, is_active=is_active)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return SimpleNamespace(
            id=user.id,
            email=user.email,
            password=password,
            headers={'Authorization': f'Bearer {issue_token(user)}'}
        )


@pytest.fixture
def admin(app):
    return make_user(app, 'admin@example.com', ROLE_ADMIN)


@pytest.fixture
def editor(app):
    return make_user(app, 'editor@example.com', ROLE_EDITOR)


@pytest.fixture
def inbox_user(app):
    return make_user(app, 'inbox@example.com', ROLE_INBOX)


def upload(content=b'data', filename='file.bin', content_type='application/octet-stream'):
    return (io.BytesIO(content), filename, content_type)


@pytest.fixture
def submit(client):
    """Post the public form; returns the response."""
    def _submit(files=None, **fields):
        data = {'name': 'Jane Doe', 'email': 'jane@example.com'}
        data.update(fields)
        if files is not None:
            data['files'] = files
        return client.post('/api/submissions/form', data=data,
                           content_type='multipart/form-data')
    return _submit
