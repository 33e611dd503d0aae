from datetime import datetime, timedelta, timezone

import jwt

from conftest import make_user
from purple_publishing.extensions import db
from purple_publishing.models import User, ROLE_EDITOR, ROLE_INBOX


def login(client, username, password):
    return client.post('/api/auth/login', json={'username': username, 'password': password})


def test_login_returns_token_role_and_email(client, admin):
    response = login(client, 'admin@example.com', 'secret123')

    assert response.status_code == 200
    body = response.get_json()
    assert body['role'] == 'Admin'
    assert body['email'] == 'admin@example.com'
    assert body['token']


def test_login_matches_email_case_insensitively_and_trimmed(client, admin):
    response = login(client, '  ADMIN@Example.com ', 'secret123')
    assert response.status_code == 200


def test_token_claims(app, client, admin):
    token = login(client, 'admin@example.com', 'secret123').get_json()['token']

    claims = jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=['HS256'],
                        audience=app.config['JWT_AUDIENCE'])
    assert claims['sub'] == admin.id
    assert claims['email'] == 'admin@example.com'
    assert claims['role'] == 'Admin'
    assert claims['iss'] == 'purple-publishing-api'
    assert claims['exp'] - claims['iat'] == 8 * 3600


def test_login_failures_are_indistinguishable(app, client, admin):
    make_user(app, 'disabled@example.com', ROLE_EDITOR, is_active=False)

    responses = [
        login(client, 'admin@example.com', 'wrong'),
        login(client, 'nobody@example.com', 'secret123'),
        login(client, 'disabled@example.com', 'secret123'),
        login(client, '', ''),
        client.post('/api/auth/login', json={}),
    ]

    assert {r.status_code for r in responses} == {401}
    assert len({r.get_data(as_text=True) for r in responses}) == 1


def test_me_returns_identity(client, inbox_user):
    response = client.get('/api/auth/me', headers=inbox_user.headers)

    assert response.status_code == 200
    assert response.get_json() == {'id': inbox_user.id, 'email': 'inbox@example.com',
                                   'role': ROLE_INBOX}


def test_me_requires_token(client):
    response = client.get('/api/auth/me')

    assert response.status_code == 401
    assert response.get_json()['error']['code'] == 'UNAUTHORIZED'


def test_malformed_and_foreign_tokens_are_rejected(app, client, admin):
    config = app.config
    now = datetime.now(timezone.utc)
    claims = {'sub': admin.id, 'iss': config['JWT_ISSUER'], 'aud': config['JWT_AUDIENCE'],
              'exp': now + timedelta(hours=1)}

    expired = jwt.encode(dict(claims, exp=now - timedelta(minutes=1)),
                         config['JWT_SECRET_KEY'], algorithm='HS256')
    wrong_audience = jwt.encode(dict(claims, aud='someone-else'),
                                config['JWT_SECRET_KEY'], algorithm='HS256')
    wrong_issuer = jwt.encode(dict(claims, iss='someone-else'),
                              config['JWT_SECRET_KEY'], algorithm='HS256')
    wrong_key = jwt.encode(claims, 'another-secret', algorithm='HS256')

    for header in ('Bearer not-a-token', f'Bearer {expired}', f'Bearer {wrong_audience}',
                   f'Bearer {wrong_issuer}', f'Bearer {wrong_key}', f'Basic {wrong_key}'):
        response = client.get('/api/auth/me', headers={'Authorization': header})
        assert response.status_code == 401, header


def test_token_stops_working_once_user_disabled(app, client, admin):
    other = make_user(app, 'other@example.com', ROLE_EDITOR)
    assert client.get('/api/auth/me', headers=other.headers).status_code == 200

    response = client.put(f'/api/users/{other.id}/active', json={'isActive': False},
                          headers=admin.headers)
    assert response.status_code == 200

    assert client.get('/api/auth/me', headers=other.headers).status_code == 401


def test_role_mismatch_is_forbidden(client, editor):
    response = client.get('/api/submissions', headers=editor.headers)

    assert response.status_code == 403
    assert response.get_json()['error']['code'] == 'FORBIDDEN'


def test_corrupt_legacy_hash_fails_like_a_wrong_password(app, client, admin):
    with app.app_context():
        user = db.session.get(User, admin.id)
        user.password_hash = 'PBKDF2$0$AAAA$AAAA'
        db.session.commit()

    response = login(client, 'admin@example.com', 'secret123')

    assert response.status_code == 401
    wrong = login(client, 'admin@example.com', 'x')
    assert response.get_data(as_text=True) == wrong.get_data(as_text=True)
