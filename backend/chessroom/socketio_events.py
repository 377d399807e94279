from flask import current_app, request
from flask_socketio import emit
from chessroom import socketio
from chessroom.realtime import Inbound, Outbound


def _coordinator():
    return current_app.extensions['coordinator']


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    _coordinator().connect(_get_sid(), auth)
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _coordinator().disconnect(_get_sid())


def handle_authenticate(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.AUTHENTICATE, data)


def handle_join_game(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.JOIN, data)


def handle_make_move(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.MOVE, data)


def handle_end_game(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.TERMINATE, data)


def handle_send_message(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.CHAT, data)


def handle_ping(data=None):
    _coordinator().dispatch(_get_sid(), Inbound.PING, data)


def handle_error(exc):
    # Anything the coordinator did not translate; keep the connection open
    current_app.logger.exception(f"[socket-error] sid={_get_sid()} event failed: {exc}")
    emit(Outbound.ERROR.value, {'code': 'internal_error', 'message': 'Request failed'})


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event(Inbound.AUTHENTICATE.value, handle_authenticate, namespace=namespace)
    socketio.on_event(Inbound.JOIN.value, handle_join_game, namespace=namespace)
    socketio.on_event(Inbound.MOVE.value, handle_make_move, namespace=namespace)
    socketio.on_event(Inbound.TERMINATE.value, handle_end_game, namespace=namespace)
    socketio.on_event(Inbound.CHAT.value, handle_send_message, namespace=namespace)
    socketio.on_event(Inbound.PING.value, handle_ping, namespace=namespace)
    socketio.on_error(namespace)(handle_error)
