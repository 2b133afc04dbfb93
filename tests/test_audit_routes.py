from datetime import datetime, timedelta, timezone

from models.log import Log
from utils.audit import write_log
from helpers import auth_headers, make_material, make_user


def test_vote_is_audited_with_material_and_username(client, db, reader, admin):
    material = make_material(db, reader, 'Audited')
    client.post(f'/vote/{material.id}', headers=auth_headers(reader))

    response = client.get('/logs', params={'resource': 'votes'}, headers=auth_headers(admin))

    assert response.status_code == 200
    body = response.json()
    assert body['total'] == 1
    [entry] = body['items']
    assert entry['action'] == 'VOTE'
    assert entry['material_id'] == material.id
    assert entry['username'] == 'reader'
    assert entry['meta'] == {'votes_count': 1}


def test_material_history(client, db, reader, admin):
    stranger = make_user(db, 'stranger')
    followed = make_material(db, reader, 'Followed', approved=False)
    other = make_material(db, stranger, 'Other')

    client.patch(f'/materials/{followed.id}/approve', headers=auth_headers(admin))
    client.post(f'/vote/{followed.id}', headers=auth_headers(stranger))
    client.post(f'/vote/{other.id}', headers=auth_headers(reader))
    client.delete(f'/materials/{followed.id}', headers=auth_headers(reader))

    response = client.get('/logs', params={'material_id': followed.id}, headers=auth_headers(admin))

    body = response.json()
    # Newest first, and the trail survives the material's deletion
    assert [e['action'] for e in body['items']] == ['MATERIAL_DELETE', 'VOTE', 'MATERIAL_APPROVE']
    assert [e['username'] for e in body['items']] == ['reader', 'stranger', 'librarian']


def test_filters_by_action_status_and_user(client, db, reader, admin):
    client.post('/login', json={'email': reader.email, 'password': 'wrong-password'})
    client.post('/login', json={'email': reader.email, 'password': 'secret123'})
    headers = auth_headers(admin)

    failed = client.get('/logs', params={'action': 'login', 'status': 'FAIL'}, headers=headers).json()
    by_user = client.get('/logs', params={'user_id': reader.id, 'resource': 'auth'}, headers=headers).json()

    assert failed['total'] == 1
    assert failed['items'][0]['user_id'] == reader.id
    assert by_user['total'] == 2


def test_time_range(client, db, reader, admin):
    write_log(db, user_id=reader.id, action='VOTE', resource='votes', material_id=1)
    db.query(Log).update({Log.ts: datetime(2025, 3, 1, 12, 0)})
    db.commit()
    write_log(db, user_id=reader.id, action='UNVOTE', resource='votes', material_id=1)
    recent = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=1)

    response = client.get('/logs', params={'since': recent.isoformat()}, headers=auth_headers(admin))

    assert [e['action'] for e in response.json()['items']] == ['UNVOTE']


def test_unknown_resource_is_rejected(client, admin):
    response = client.get('/logs', params={'resource': 'products'}, headers=auth_headers(admin))

    assert response.status_code == 422


def test_logs_require_admin(client, reader):
    assert client.get('/logs', headers=auth_headers(reader)).status_code == 403
