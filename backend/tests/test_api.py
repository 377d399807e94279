def _auth(token):
    return {'Authorization': f'Bearer {token}'}


def _register(client, username, password='secret123'):
    return client.post('/api/auth/register', json={
        'username': username,
        'email': f'{username}@example.com',
        'password': password,
    })


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'OK'


def test_register_login_and_verify(client):
    res = _register(client, 'alice')
    assert res.status_code == 201
    data = res.get_json()
    assert data['user']['username'] == 'alice'
    assert data['user']['rating'] == 1200
    assert data['token']

    res = client.post('/api/auth/login', json={'username': 'alice', 'password': 'secret123'})
    assert res.status_code == 200
    token = res.get_json()['token']

    res = client.get('/api/auth/verify', headers=_auth(token))
    assert res.get_json() == {'valid': True, 'userId': data['user']['id']}


def test_register_validation(client):
    assert client.post('/api/auth/register', json={'username': 'x'}).status_code == 400
    assert _register(client, 'shorty', password='123').status_code == 400
    assert _register(client, 'alice').status_code == 201
    res = _register(client, 'alice')
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Username already exists'


def test_login_rejects_bad_password(client):
    _register(client, 'alice')
    res = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong-one'})
    assert res.status_code == 401


def test_verify_rejects_missing_and_forged_tokens(client):
    assert client.get('/api/auth/verify').status_code == 401
    assert client.get('/api/auth/verify', headers=_auth('forged')).status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.post('/api/games/create').status_code == 401
    assert client.get('/api/users/profile').status_code == 401


def test_create_list_and_join_game(client):
    alice = _register(client, 'alice').get_json()
    bob = _register(client, 'bob').get_json()

    res = client.post('/api/games/create', headers=_auth(alice['token']))
    assert res.status_code == 201
    game = res.get_json()['game']
    assert game['status'] == 'waiting'
    assert game['player1_username'] == 'alice'
    assert game['current_turn'] == 'white'

    listed = client.get('/api/games/').get_json()['games']
    assert [g['id'] for g in listed] == [game['id']]

    res = client.post(f"/api/games/{game['id']}/join", headers=_auth(alice['token']))
    assert res.status_code == 400
    assert res.get_json()['error'] == 'Cannot join your own game'

    res = client.post(f"/api/games/{game['id']}/join", headers=_auth(bob['token']))
    assert res.status_code == 200
    joined = res.get_json()['game']
    assert joined['status'] == 'active'
    assert joined['player2_username'] == 'bob'

    assert client.get('/api/games/').get_json()['games'] == []
    mine = client.get('/api/games/user/my-games', headers=_auth(bob['token'])).get_json()['games']
    assert [g['id'] for g in mine] == [game['id']]

    carol = _register(client, 'carol').get_json()
    res = client.post(f"/api/games/{game['id']}/join", headers=_auth(carol['token']))
    assert res.status_code == 400


def test_get_game_and_history(client, coordinator):
    alice = _register(client, 'alice').get_json()
    game_id = client.post('/api/games/create', headers=_auth(alice['token'])).get_json()['game']['id']
    assert client.get(f'/api/games/{game_id}', headers=_auth(alice['token'])).status_code == 200
    assert client.get('/api/games/999', headers=_auth(alice['token'])).status_code == 404

    coordinator.connect('s1', {'token': alice['token']})
    coordinator.move('s1', game_id, 'd4')
    history = client.get(f'/api/games/{game_id}/history', headers=_auth(alice['token'])).get_json()
    assert history['moves'] == [{'move_number': 1, 'player_id': alice['user']['id'], 'move': 'd4'}]


def test_public_profile_and_leaderboard(client, store):
    alice = _register(client, 'alice').get_json()
    bob = _register(client, 'bob').get_json()
    _register(client, 'idle')
    store.apply_stats_delta(alice['user']['id'], 'win')
    store.apply_stats_delta(bob['user']['id'], 'loss')

    res = client.get(f"/api/users/{bob['user']['id']}")
    assert res.status_code == 200
    assert 'email' not in res.get_json()['user']
    assert client.get('/api/users/424242').status_code == 404

    board = client.get('/api/users/leaderboard/top').get_json()['leaderboard']
    assert [row['username'] for row in board] == ['alice', 'bob']
    assert board[0]['rating'] == 1225
    assert board[0]['totalGames'] == 1
    assert len(client.get('/api/users/leaderboard/top?limit=1').get_json()['leaderboard']) == 1
