import pytest

from conftest import make_user
from purple_publishing.errors import ValidationError
from purple_publishing.extensions import db
from purple_publishing.models import User, ROLE_ADMIN, ROLE_EDITOR, ROLE_INBOX
from purple_publishing.routes.users import _guard_active_change, _guard_role_change

LAST_ADMIN = 'Cannot remove or disable the last active Admin account.'


def error_message(response):
    return response.get_json()['error']['message']


def test_admin_only(client, editor):
    assert client.get('/api/users').status_code == 401
    assert client.get('/api/users', headers=editor.headers).status_code == 403


def test_list_newest_first(app, client, admin):
    make_user(app, 'later@example.com', ROLE_INBOX)

    users = client.get('/api/users', headers=admin.headers).get_json()

    assert [u['email'] for u in users] == ['later@example.com', 'admin@example.com']
    assert set(users[0]) == {'id', 'email', 'role', 'isActive', 'createdAt'}
    assert 'password' not in str(users)


def test_create_user(client, admin):
    response = client.post('/api/users', json={
        'email': ' new@example.com ', 'password': 'pw12345', 'role': 'Editor'
    }, headers=admin.headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body['email'] == 'new@example.com'
    assert body['role'] == 'Editor'
    assert body['isActive'] is True

    login = client.post('/api/auth/login', json={'username': 'new@example.com',
                                                  'password': 'pw12345'})
    assert login.status_code == 200


@pytest.mark.parametrize('payload', [
    {'password': 'pw', 'role': 'Editor'},
    {'email': 'x@example.com', 'role': 'Editor'},
    {'email': 'x@example.com', 'password': 'pw'},
    {'email': 'x@example.com', 'password': 'pw', 'role': 'admin'},
    {'email': 'x@example.com', 'password': 'pw', 'role': 'Owner'},
])
def test_create_user_validation(client, admin, payload):
    assert client.post('/api/users', json=payload, headers=admin.headers).status_code == 400


def test_create_duplicate_email_case_insensitive(client, admin):
    response = client.post('/api/users', json={
        'email': 'ADMIN@example.com', 'password': 'pw', 'role': 'Inbox'
    }, headers=admin.headers)

    assert response.status_code == 409
    assert error_message(response) == 'User already exists.'


def test_general_update(app, client, admin):
    other = make_user(app, 'other@example.com', ROLE_INBOX)

    response = client.put(f'/api/users/{other.id}', json={
        'email': 'renamed@example.com', 'role': 'Editor', 'password': 'newpass1'
    }, headers=admin.headers)

    assert response.status_code == 200
    assert response.get_json()['role'] == 'Editor'
    assert client.post('/api/auth/login', json={
        'username': 'renamed@example.com', 'password': 'newpass1'
    }).status_code == 200


def test_update_email_conflict(app, client, admin):
    other = make_user(app, 'other@example.com', ROLE_INBOX)

    response = client.put(f'/api/users/{other.id}', json={'email': 'Admin@Example.com'},
                          headers=admin.headers)

    assert response.status_code == 409
    assert error_message(response) == 'Email already in use.'


def test_update_rejects_blank_email(app, client, admin):
    other = make_user(app, 'other@example.com', ROLE_INBOX)

    response = client.put(f'/api/users/{other.id}', json={'email': '   ', 'role': 'Editor'},
                          headers=admin.headers)

    assert response.status_code == 400
    assert error_message(response) == 'Email cannot be empty.'
    with app.app_context():
        assert db.session.get(User, other.id).role == ROLE_INBOX


def test_unknown_user_is_404(client, admin):
    assert client.put('/api/users/nope/role', json={'role': 'Inbox'},
                      headers=admin.headers).status_code == 404


class TestSelfGuards:

    def test_cannot_change_own_role(self, app, client, admin):
        make_user(app, 'second@example.com', ROLE_ADMIN)

        response = client.put(f'/api/users/{admin.id}/role', json={'role': 'Editor'},
                              headers=admin.headers)

        assert response.status_code == 400
        assert error_message(response) == 'You cannot change your own role.'

    def test_same_role_is_not_a_change(self, client, admin):
        response = client.put(f'/api/users/{admin.id}/role', json={'role': 'Admin'},
                              headers=admin.headers)
        assert response.status_code == 200

    def test_cannot_disable_self(self, app, client, admin):
        make_user(app, 'second@example.com', ROLE_ADMIN)

        response = client.put(f'/api/users/{admin.id}/active', json={'isActive': False},
                              headers=admin.headers)

        assert response.status_code == 400
        assert error_message(response) == 'You cannot disable your own account.'

    def test_cannot_delete_self(self, app, client, admin):
        make_user(app, 'second@example.com', ROLE_ADMIN)

        response = client.delete(f'/api/users/{admin.id}', headers=admin.headers)

        assert response.status_code == 400
        assert error_message(response) == 'Cannot delete the currently logged-in user.'

    def test_general_update_applies_guards(self, app, client, admin):
        make_user(app, 'second@example.com', ROLE_ADMIN)

        response = client.put(f'/api/users/{admin.id}', json={'role': 'Inbox'},
                              headers=admin.headers)
        assert response.status_code == 400

        response = client.put(f'/api/users/{admin.id}', json={'isActive': False},
                              headers=admin.headers)
        assert response.status_code == 400


class TestLastAdminGuard:
    """The caller is an Editor here so the only Admin is someone else."""

    @pytest.fixture
    def caller(self, app):
        return make_user(app, 'caller@example.com', ROLE_EDITOR)

    def test_only_active_admin_is_protected(self, app, admin, caller):
        with app.test_request_context(headers=caller.headers):
            target = db.session.get(User, admin.id)
            assert target.is_last_active_admin()

            with pytest.raises(ValidationError, match=LAST_ADMIN):
                _guard_role_change(target, ROLE_INBOX)
            with pytest.raises(ValidationError, match=LAST_ADMIN):
                _guard_active_change(target, False)

    def test_allowed_when_another_active_admin_exists(self, app, admin, caller):
        make_user(app, 'second@example.com', ROLE_ADMIN)

        with app.test_request_context(headers=caller.headers):
            target = db.session.get(User, admin.id)
            assert not target.is_last_active_admin()
            _guard_role_change(target, ROLE_INBOX)
            _guard_active_change(target, False)

    def test_inactive_admins_do_not_count(self, app, admin, caller):
        make_user(app, 'dormant@example.com', ROLE_ADMIN, is_active=False)

        with app.test_request_context(headers=caller.headers):
            with pytest.raises(ValidationError, match=LAST_ADMIN):
                _guard_active_change(db.session.get(User, admin.id), False)

    def test_two_admins_can_demote_each_other_down_to_one(self, app, client, admin):
        second = make_user(app, 'second@example.com', ROLE_ADMIN)

        response = client.put(f'/api/users/{second.id}/role', json={'role': 'Inbox'},
                              headers=admin.headers)
        assert response.status_code == 200

        response = client.delete(f'/api/users/{second.id}', headers=admin.headers)
        assert response.status_code == 204
        with app.app_context():
            assert User.query.filter_by(role=ROLE_ADMIN, is_active=True).count() == 1
