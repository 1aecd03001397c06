from functools import wraps
from typing import Any, Dict

from flask import current_app, request
from flask_socketio import emit

from telephone import socketio
from telephone.errors import GameError

NAMESPACE = '/'


class SocketIOTransport:
    """Send/enter/leave on top of the Socket.IO server.

    Every connection sid is also a Socket.IO room, so ``to`` may be either
    a room id or a single connection.
    """

    def __init__(self, sio, namespace: str = NAMESPACE):
        self.sio = sio
        self.namespace = namespace

    def send(self, event: str, payload: Dict[str, Any], to: str) -> None:
        self.sio.emit(event, payload, to=to, namespace=self.namespace)

    def enter(self, sid: str, room_id: str) -> None:
        self.sio.server.enter_room(sid, room_id, namespace=self.namespace)

    def leave(self, sid: str, room_id: str) -> None:
        self.sio.server.leave_room(sid, room_id, namespace=self.namespace)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def _registry():
    return current_app.extensions['telephone_rooms']

def _room_id(data) -> str:
    return data.get('room_id') or data.get('roomId')


def acknowledged(handler):
    """Turn a handler's result or GameError into the event's ack payload."""
    @wraps(handler)
    def wrapper(data=None):
        data = data if isinstance(data, dict) else {}
        try:
            result = handler(data)
        except GameError as exc:
            current_app.logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} err={exc.code}")
            return exc.to_ack()
        ack = {'ok': True}
        if result:
            ack.update(result)
        return ack
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'sid': _get_sid()})


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _registry().handle_disconnect(_get_sid())


@acknowledged
def handle_create_room(data):
    room = _registry().create_room(_get_sid(), data.get('name'))
    return {'room_id': room.id}


@acknowledged
def handle_join_room(data):
    room = _registry().join_room(_get_sid(), _room_id(data), data.get('name'))
    return {'room_id': room.id}


@acknowledged
def handle_leave_room(data):
    _registry().leave(_get_sid())


@acknowledged
def handle_update_settings(data):
    settings = _registry().update_settings(_get_sid(), _room_id(data), data.get('settings'))
    return {'settings': settings.to_dict()}


@acknowledged
def handle_start_game(data):
    _registry().start_game(_get_sid(), _room_id(data))


@acknowledged
def handle_submit_prompt(data):
    _registry().submit_prompt(_get_sid(), _room_id(data), data.get('prompt'))


@acknowledged
def handle_drawing_event(data):
    target_id = data.get('target_id') or data.get('targetId')
    saved = _registry().drawing_event(_get_sid(), _room_id(data), target_id, data.get('ev'))
    return {'saved': saved}


@acknowledged
def handle_finish_drawing(data):
    _registry().finish_drawing(_get_sid(), _room_id(data))


@acknowledged
def handle_submit_description(data):
    _registry().submit_description(_get_sid(), _room_id(data), data.get('text'))


@acknowledged
def handle_request_reveal(data):
    _registry().request_reveal(_get_sid(), _room_id(data))


@acknowledged
def handle_request_draw_for_describe(data):
    _registry().request_draw_for_describe(_get_sid(), _room_id(data))


def register_socketio_handlers(namespace: str = NAMESPACE) -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create_room', handle_create_room, namespace=namespace)
    socketio.on_event('join_room', handle_join_room, namespace=namespace)
    socketio.on_event('leave_room', handle_leave_room, namespace=namespace)
    socketio.on_event('update_settings', handle_update_settings, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('submit_prompt', handle_submit_prompt, namespace=namespace)
    socketio.on_event('drawing_event', handle_drawing_event, namespace=namespace)
    socketio.on_event('finish_drawing', handle_finish_drawing, namespace=namespace)
    socketio.on_event('submit_description', handle_submit_description, namespace=namespace)
    socketio.on_event('request_reveal', handle_request_reveal, namespace=namespace)
    socketio.on_event('request_draw_for_describe', handle_request_draw_for_describe, namespace=namespace)
