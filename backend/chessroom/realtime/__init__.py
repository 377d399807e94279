"""Realtime play: live session roster, coordinator and event delivery."""

from .registry import SessionRegistry, SessionState
from .relay import EventRelay, RecordingRelay, SocketIORelay, room_name
from .coordinator import OBSERVER, ConnectionContext, SessionCoordinator
from .events import Inbound, Outbound

__all__ = [
    'SessionRegistry', 'SessionState',
    'EventRelay', 'RecordingRelay', 'SocketIORelay', 'room_name',
    'OBSERVER', 'ConnectionContext', 'SessionCoordinator',
    'Inbound', 'Outbound',
]
