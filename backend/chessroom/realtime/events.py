"""Names of the realtime events exchanged with clients."""
from enum import Enum


class Inbound(str, Enum):
    AUTHENTICATE = 'authenticate'
    JOIN = 'join_game'
    MOVE = 'make_move'
    TERMINATE = 'end_game'
    CHAT = 'send_message'
    PING = 'ping'


class Outbound(str, Enum):
    AUTHENTICATED = 'authenticated'
    AUTH_FAILED = 'auth_error'
    JOINED = 'game_joined'
    PARTICIPANT_CONNECTED = 'user_connected'
    OPPONENT_JOINED = 'opponent_joined'
    MOVE_BROADCAST = 'move_made'
    SESSION_ENDED = 'game_ended'
    CHAT_BROADCAST = 'new_message'
    PLAYER_DISCONNECTED = 'player_disconnected'
    PONG = 'pong'
    ERROR = 'error'


# Events that need a verified identity on the connection
REQUIRES_IDENTITY = frozenset({Inbound.JOIN, Inbound.MOVE, Inbound.TERMINATE, Inbound.CHAT})
