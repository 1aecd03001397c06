def _events(sio_client, name):
    return [pkt['args'][0] if pkt['args'] else None for pkt in sio_client.get_received() if pkt['name'] == name]


def test_socket_connect_announces_sid(sio_client):
    assert sio_client.is_connected()
    assert sio_client.player_id


def test_create_and_join_room(make_sio_client):
    host = make_sio_client()
    guest = make_sio_client()

    ack = host.emit('create_room', {'name': 'Ann'}, callback=True)
    assert ack['ok'] is True
    room_id = ack['room_id']

    ack = guest.emit('join_room', {'room_id': room_id, 'name': 'Bob'}, callback=True)
    assert ack == {'ok': True, 'room_id': room_id}

    updates = _events(host, 'room_update')
    assert updates[-1]['host_id'] == host.player_id
    assert [p['name'] for p in updates[-1]['players']] == ['Ann', 'Bob']


def test_join_missing_room_is_rejected(sio_client):
    ack = sio_client.emit('join_room', {'room_id': 'nothere', 'name': 'Bob'}, callback=True)
    assert ack == {'ok': False, 'err': 'RoomNotFound'}


def test_non_host_start_is_rejected(make_sio_client):
    host = make_sio_client()
    guest = make_sio_client()
    room_id = host.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    guest.emit('join_room', {'room_id': room_id, 'name': 'Bob'}, callback=True)

    assert guest.emit('start_game', {'room_id': room_id}, callback=True) == {'ok': False, 'err': 'NotHost'}
    ack = guest.emit('update_settings', {'room_id': room_id, 'settings': {'rounds': 5}}, callback=True)
    assert ack == {'ok': False, 'err': 'NotHost'}

    assert host.emit('start_game', {'room_id': room_id}, callback=True) == {'ok': True}
    assert host.emit('start_game', {'room_id': room_id}, callback=True) == {'ok': False, 'err': 'AlreadyStarted'}


def test_host_disconnect_hands_over_host(make_sio_client):
    host = make_sio_client()
    guest = make_sio_client()
    room_id = host.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    guest.emit('join_room', {'room_id': room_id, 'name': 'Bob'}, callback=True)
    guest.get_received()

    host.disconnect()

    updates = _events(guest, 'room_update')
    assert updates[-1]['host_id'] == guest.player_id
    assert [p['name'] for p in updates[-1]['players']] == ['Bob']


def test_full_round_over_sockets(make_sio_client):
    a, b = make_sio_client(), make_sio_client()
    room_id = a.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    b.emit('join_room', {'roomId': room_id, 'name': 'Bob'}, callback=True)

    assert a.emit('start_game', {'room_id': room_id}, callback=True) == {'ok': True}
    received = a.get_received()
    assert [pkt['name'] for pkt in received if pkt['name'] in ('game_started', 'game_phase')] == ['game_started', 'game_phase']

    assert a.emit('submit_prompt', {'room_id': room_id, 'prompt': 'cat'}, callback=True) == {'ok': True}
    assert b.emit('submit_prompt', {'room_id': room_id, 'prompt': 'dog'}, callback=True) == {'ok': True}
    drawing = _events(a, 'phase_drawing')
    assert len(drawing) == 1
    assert drawing[0]['mapping'][a.player_id]['prompt'] == 'dog'
    assert drawing[0]['mapping'][b.player_id]['prompt'] == 'cat'

    ack = a.emit('drawing_event', {'room_id': room_id, 'target_id': a.player_id, 'ev': {'type': 'stroke_end', 'pts': [0, 1]}}, callback=True)
    assert ack == {'ok': True, 'saved': True}
    relayed = _events(a, 'drawing_event')
    assert relayed == [{'from': a.player_id, 'ev': {'type': 'stroke_end', 'pts': [0, 1]}}]

    a.emit('finish_drawing', {'room_id': room_id}, callback=True)
    b.emit('finish_drawing', {'room_id': room_id}, callback=True)
    describe = _events(b, 'phase_describe')
    assert describe[-1]['to_describe'][a.player_id] == [{'type': 'stroke_end', 'pts': [0, 1]}]

    a.emit('submit_description', {'room_id': room_id, 'text': 'a dog'}, callback=True)
    assert b.emit('submit_description', {'room_id': room_id, 'text': 'a cat'}, callback=True) == {'ok': True}
    reveal = _events(b, 'game_reveal')[-1]['reveal']
    assert reveal[b.player_id]['prompt'] == 'dog'
    assert reveal[b.player_id]['drawing_owner'] == a.player_id
    assert reveal[b.player_id]['description_text'] == 'a dog'

    assert a.emit('request_reveal', {'room_id': room_id}, callback=True) == {'ok': True}
    assert _events(a, 'game_reveal')[-1]['reveal'] == reveal


def test_submission_in_wrong_phase_is_rejected(sio_client):
    room_id = sio_client.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    ack = sio_client.emit('submit_prompt', {'room_id': room_id, 'prompt': 'x'}, callback=True)
    assert ack == {'ok': False, 'err': 'WrongPhase'}
    ack = sio_client.emit('finish_drawing', {'room_id': room_id}, callback=True)
    assert ack == {'ok': False, 'err': 'WrongPhase'}


def test_leave_room_destroys_empty_room(flask_app, sio_client):
    room_id = sio_client.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    assert sio_client.emit('leave_room', callback=True) == {'ok': True}
    assert sio_client.emit('leave_room', callback=True) == {'ok': True}
    assert len(flask_app.extensions['telephone_rooms']) == 0
    ack = sio_client.emit('join_room', {'room_id': room_id, 'name': 'Ann'}, callback=True)
    assert ack == {'ok': False, 'err': 'RoomNotFound'}


def test_prompt_without_text_still_counts(make_sio_client):
    a, b = make_sio_client(), make_sio_client()
    room_id = a.emit('create_room', {'name': 'Ann'}, callback=True)['room_id']
    b.emit('join_room', {'room_id': room_id, 'name': 'Bob'}, callback=True)
    a.emit('start_game', {'room_id': room_id}, callback=True)

    assert a.emit('submit_prompt', {'room_id': room_id}, callback=True) == {'ok': True}
    assert b.emit('submit_prompt', {'room_id': room_id, 'prompt': 'dog'}, callback=True) == {'ok': True}
    drawing = _events(b, 'phase_drawing')
    assert drawing[-1]['mapping'][b.player_id]['prompt'] == ''

    ack = a.emit('drawing_event', {'room_id': room_id, 'target_id': b.player_id, 'ev': 'garbage'}, callback=True)
    assert ack == {'ok': True, 'saved': False}
