"""Outbound delivery of coordinator events.

The coordinator only talks to a relay, so its transitions can be exercised
without a Socket.IO server. ``SocketIORelay`` is the production transport;
``RecordingRelay`` keeps everything in memory.
"""
from typing import Dict, List, Optional, Set


def room_name(game_id) -> str:
    return f"game:{game_id}"


class EventRelay:

    def to_connection(self, sid: str, event: str, payload: dict) -> None:
        raise NotImplementedError

    def to_room(self, game_id, event: str, payload: dict, skip_sid: Optional[str] = None) -> None:
        raise NotImplementedError

    def enter_room(self, sid: str, game_id) -> None:
        raise NotImplementedError


class SocketIORelay(EventRelay):

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def to_connection(self, sid, event, payload):
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def to_room(self, game_id, event, payload, skip_sid=None):
        self.socketio.emit(event, payload, to=room_name(game_id),
                           skip_sid=skip_sid, namespace=self.namespace)

    def enter_room(self, sid, game_id):
        self.socketio.server.enter_room(sid, room_name(game_id), namespace=self.namespace)


class RecordingRelay(EventRelay):
    """Delivers into per-connection inboxes; rooms are plain sets of sids."""

    def __init__(self):
        self.rooms: Dict[str, Set[str]] = {}
        self.inbox: Dict[str, List[dict]] = {}

    def to_connection(self, sid, event, payload):
        self.inbox.setdefault(sid, []).append({'name': event, 'args': [payload]})

    def to_room(self, game_id, event, payload, skip_sid=None):
        for sid in sorted(self.rooms.get(room_name(game_id), ())):
            if sid != skip_sid:
                self.to_connection(sid, event, payload)

    def enter_room(self, sid, game_id):
        self.rooms.setdefault(room_name(game_id), set()).add(sid)

    def leave_all(self, sid):
        for members in self.rooms.values():
            members.discard(sid)

    def received(self, sid) -> List[dict]:
        """Drain and return everything delivered to ``sid`` so far."""
        return self.inbox.pop(sid, [])
