def _events(sio_client, name):
    return [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect_and_subscribe(sio_client, client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('subscribe', {'game_code': code}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'subscribed' for pkt in received)


def test_subscribe_unknown_game_reports_error(sio_client):
    sio_client.emit('subscribe', {'game_code': 'nope'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors and errors[0]['code'] == 'not_found'

    sio_client.emit('subscribe', {}, namespace='/ws')
    assert _events(sio_client, 'error') == [{'message': 'game_code is required'}]


def test_subscriber_receives_round_events(flask_app, sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('subscribe', {'game_code': code}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    client.post(f'/api/games/{code}/join', json={'player_id': 'p1'})
    assert _events(sio_client, 'joined') == [{'type': 'joined', 'player_id': 'p1'}]

    prompt = client.post(f'/api/games/{code}/start').get_json()
    assert _events(sio_client, 'prompt') == [{'type': 'prompt', 'id': prompt['id'], 'prompt': prompt['prompt']}]

    client.post(f'/api/games/{code}/response',
                json={'prompt_id': prompt['id'], 'player_id': 'p1', 'response': 'hi'})
    assert _events(sio_client, 'responses_submitted') == [
        {'type': 'responses_submitted', 'id': prompt['id'], 'responses': {'p1': 'hi'}}
    ]


def test_disconnect_prunes_subscriber(flask_app, client):
    from promptparty import socketio as _sio
    code = client.post('/api/games/create').get_json()['game_code']
    guest = _sio.test_client(flask_app, namespace='/ws')
    guest.emit('subscribe', {'game_code': code}, namespace='/ws')
    assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 1

    guest.disconnect(namespace='/ws')
    assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 0


def test_unsubscribe_and_ping(sio_client, client):
    code = client.post('/api/games/create').get_json()['game_code']
    sio_client.emit('subscribe', {'game_code': code}, namespace='/ws')
    sio_client.emit('unsubscribe', {'game_code': code}, namespace='/ws')
    assert _events(sio_client, 'unsubscribed') == [{'game_code': code}]
    assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 0

    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    assert _events(sio_client, 'pong') == [{'n': 1}]


def test_repeat_subscribe_delivers_once(flask_app, client):
    from promptparty import socketio as _sio
    code = client.post('/api/games/create').get_json()['game_code']
    guest = _sio.test_client(flask_app, namespace='/ws')
    guest.emit('subscribe', {'game_code': code}, namespace='/ws')
    guest.emit('subscribe', {'game_code': code}, namespace='/ws')
    guest.get_received('/ws')  # flush
    assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 1

    client.post(f'/api/games/{code}/join', json={'player_id': 'p1'})
    assert _events(guest, 'joined') == [{'type': 'joined', 'player_id': 'p1'}]

    guest.disconnect(namespace='/ws')
    assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 0


def test_disconnect_prunes_every_subscribed_game(flask_app, client):
    from promptparty import socketio as _sio
    code_a = client.post('/api/games/create').get_json()['game_code']
    code_b = client.post('/api/games/create').get_json()['game_code']
    guest = _sio.test_client(flask_app, namespace='/ws')
    guest.emit('subscribe', {'game_code': code_a}, namespace='/ws')
    guest.emit('subscribe', {'game_code': code_b}, namespace='/ws')

    guest.disconnect(namespace='/ws')
    for code in (code_a, code_b):
        assert client.get(f'/api/games/{code}/state').get_json()['subscriber_count'] == 0
