from helpers import add_votes, auth_headers, make_material, make_user


def test_vote_toggle_round_trip(client, db, reader):
    owner = make_user(db, 'owner')
    material = make_material(db, owner, 'Algebra')
    add_votes(db, material, [owner])
    headers = auth_headers(reader)

    cast = client.post(f'/vote/{material.id}', headers=headers)
    withdrawn = client.post(f'/vote/{material.id}', headers=headers)

    assert cast.status_code == 200
    assert cast.json() == {'voted': True, 'votesCount': 2}
    assert withdrawn.status_code == 200
    assert withdrawn.json() == {'voted': False, 'votesCount': 1}
    assert client.get(f'/vote/{material.id}', headers=headers).json() == {
        'materialId': material.id,
        'totalVotes': 1,
    }


def test_vote_on_missing_material(client, reader):
    response = client.post('/vote/9999', headers=auth_headers(reader))

    assert response.status_code == 404


def test_vote_on_hidden_material(client, db, reader):
    stranger = make_user(db, 'stranger')
    pending = make_material(db, stranger, 'Pending', approved=False)

    response = client.post(f'/vote/{pending.id}', headers=auth_headers(reader))

    assert response.status_code == 404


def test_remove_vote_is_idempotent(client, db, reader):
    material = make_material(db, reader, 'Algebra')
    headers = auth_headers(reader)
    client.post(f'/vote/{material.id}', headers=headers)

    for _ in range(2):
        response = client.delete(f'/vote/{material.id}', headers=headers)
        assert response.status_code == 200
        assert response.json() == {'message': 'Vote removed successfully'}

    assert client.get(f'/vote/{material.id}', headers=headers).json()['totalVotes'] == 0


def test_vote_count_for_unknown_material_is_zero(client, reader):
    response = client.get('/vote/9999', headers=auth_headers(reader))

    assert response.status_code == 200
    assert response.json() == {'materialId': 9999, 'totalVotes': 0}


def test_votes_show_in_catalog(client, db, reader):
    material = make_material(db, reader, 'Algebra')
    headers = auth_headers(reader)
    client.post(f'/vote/{material.id}', headers=headers)

    [item] = client.get('/materials', headers=headers).json()['readingMaterials']

    assert item['votesCount'] == 1
    assert item['hasVoted'] is True
