import os

import pytest

from conftest import upload


def post_file(client, headers, **data):
    return client.post('/api/uploads/file', data=data, headers=headers,
                       content_type='multipart/form-data')


def test_upload_and_serve(app, client, admin):
    response = post_file(client, admin.headers, file=upload(b'PNGDATA', 'Logo.PNG', 'image/png'))

    assert response.status_code == 200
    url = response.get_json()['url']
    assert url.startswith('/uploads/cms/')
    assert url.endswith('.png')
    assert 'Logo' not in url

    served = client.get(url)
    assert served.status_code == 200
    assert served.data == b'PNGDATA'


@pytest.mark.parametrize('folder,expected', [
    ('Artists/Hero Images', 'artists/hero-images'),
    ('../../etc', 'etc'),
    ('..\\secret//x', 'secret/x'),
    ('   ', 'cms'),
])
def test_folder_is_sanitised(app, client, admin, folder, expected):
    response = post_file(client, admin.headers, folder=folder,
                         file=upload(b'x', 'a.jpg', 'image/jpeg'))

    url = response.get_json()['url']
    assert url.rsplit('/', 1)[0] == f'/uploads/{expected}'
    stored = os.path.join(app.config['UPLOAD_FOLDER'], *url[len('/uploads/'):].split('/'))
    assert os.path.isfile(stored)


def test_missing_or_empty_file(client, admin):
    assert post_file(client, admin.headers).status_code == 400
    assert post_file(client, admin.headers, file=upload(b'', 'empty.png')).status_code == 400


def test_upload_is_admin_only(client, editor):
    assert post_file(client, {}, file=upload()).status_code == 401
    assert post_file(client, editor.headers, file=upload()).status_code == 403


def test_missing_public_file_is_404(client):
    assert client.get('/uploads/cms/nothing.png').status_code == 404
    assert client.get('/uploads/../config.py').status_code == 404
