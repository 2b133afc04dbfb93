from models.log import Log
from models.users import User
from helpers import auth_headers, make_user


def _register(client, **overrides):
    payload = {
        'email': 'New.Reader@College.edu',
        'username': 'newreader',
        'password': 'secret123',
        'first_name': 'New',
        'last_name': 'Reader',
    }
    payload.update(overrides)
    return client.post('/register', json=payload)


def test_register_creates_inactive_user(client, db):
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body['email'] == 'new.reader@college.edu'
    assert body['role'] == 'user'
    assert body['is_active'] is False
    assert 'newreader' in body['profile_image']
    assert 'password' not in body and 'password_hash' not in body

    user = db.query(User).filter(User.username == 'newreader').one()
    assert user.password_hash != 'secret123'


def test_register_rejects_duplicates(client):
    assert _register(client).status_code == 201

    same_email = _register(client, username='someoneelse')
    same_username = _register(client, email='other@college.edu')

    assert same_email.status_code == 409
    assert same_email.json()['detail'] == 'Email already exists'
    assert same_username.status_code == 409
    assert same_username.json()['detail'] == 'Username already exists'


def test_register_validates_payload(client):
    assert _register(client, password='123').status_code == 422
    assert _register(client, email='not-an-email').status_code == 422


def test_login_pending_account_is_refused(client):
    _register(client)

    response = client.post('/login', json={'email': 'new.reader@college.edu', 'password': 'secret123'})

    assert response.status_code == 403


def test_login_after_approval(client, db, admin):
    _register(client)
    user = db.query(User).filter(User.username == 'newreader').one()

    approve = client.patch(f'/users/{user.id}/approve', headers=auth_headers(admin))
    assert approve.status_code == 200
    assert approve.json()['is_active'] is True

    response = client.post('/login', json={'email': 'new.reader@college.edu', 'password': 'secret123'})

    assert response.status_code == 200
    body = response.json()
    assert body['token_type'] == 'bearer'
    assert body['access_token']
    assert body['user']['username'] == 'newreader'


def test_login_wrong_password(client, db, reader):
    response = client.post('/login', json={'email': reader.email, 'password': 'wrong-password'})

    assert response.status_code == 401
    db.expire_all()
    failures = db.query(Log).filter(Log.action == 'LOGIN', Log.status == 'FAIL').count()
    assert failures == 1


def test_me_returns_current_user(client, reader):
    response = client.get('/me', headers=auth_headers(reader))

    assert response.status_code == 200
    assert response.json()['username'] == 'reader'


def test_invalid_token_is_rejected(client):
    response = client.get('/me', headers={'Authorization': 'Bearer not-a-token'})

    assert response.status_code == 401


def test_user_admin_endpoints_require_admin(client, db, reader):
    pending = make_user(db, 'pending', active=False)

    assert client.get('/users', headers=auth_headers(reader)).status_code == 403
    assert client.patch(f'/users/{pending.id}/approve', headers=auth_headers(reader)).status_code == 403


def test_admin_lists_pending_users(client, db, admin):
    make_user(db, 'pending', active=False)

    response = client.get('/users', params={'is_active': 'false'}, headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body['total'] == 1
    assert body['items'][0]['username'] == 'pending'


def test_admin_cannot_delete_self(client, admin):
    response = client.delete(f'/users/{admin.id}', headers=auth_headers(admin))

    assert response.status_code == 400


def test_inactive_user_token_is_refused(client, db):
    pending = make_user(db, 'pending', active=False)

    response = client.get('/materials', headers=auth_headers(pending))

    assert response.status_code == 403
