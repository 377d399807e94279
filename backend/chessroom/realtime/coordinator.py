"""Live session coordinator.

Handles one connection event at a time: resolves the caller's identity,
reads a fresh game snapshot from the store, applies the transition and
hands the resulting events to the relay. The session registry is only
touched after the matching store write has succeeded.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Optional, Set
import logging

from chessroom.errors import (
    Conflict, InvalidRequest, NotAuthenticated, NotAuthorized, NotFound,
    OutOfTurn, SessionError,
)
from chessroom.services.games import (
    BLACK, OUTCOMES, WHITE, append_move, side_to_move, stat_changes,
)
from chessroom.store import UNFINISHED
from .events import Inbound, Outbound, REQUIRES_IDENTITY

OBSERVER = 'spectator'
MAX_MOVE_LENGTH = 64


@dataclass
class ConnectionContext:
    sid: str
    participant_id: Optional[int] = None
    game_ids: Set[int] = field(default_factory=set)


def _utc_timestamp():
    return datetime.now(timezone.utc).isoformat()


class SessionCoordinator:

    def __init__(self, registry, store, relay, verifier, logger=None, clock=None):
        self.registry = registry
        self.store = store
        self.relay = relay
        self.verifier = verifier
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock or _utc_timestamp
        self._connections: Dict[str, ConnectionContext] = {}
        self._lock = RLock()
        self._handlers = {
            Inbound.AUTHENTICATE: self._on_authenticate,
            Inbound.JOIN: self._on_join,
            Inbound.MOVE: self._on_move,
            Inbound.TERMINATE: self._on_terminate,
            Inbound.CHAT: self._on_chat,
            Inbound.PING: self._on_ping,
        }

    # ---- connection lifecycle ----

    def connect(self, sid: str, auth=None) -> ConnectionContext:
        with self._lock:
            ctx = self._connections.setdefault(sid, ConnectionContext(sid=sid))
        token = auth.get('token') if isinstance(auth, dict) else None
        if token:
            self.authenticate(sid, token)
        return ctx

    def context(self, sid: str) -> Optional[ConnectionContext]:
        with self._lock:
            return self._connections.get(sid)

    def dispatch(self, sid: str, event, payload=None) -> None:
        """Run one inbound event; failures go back to ``sid`` as an error event."""
        try:
            kind = Inbound(event)
        except ValueError:
            self.relay.to_connection(sid, Outbound.ERROR.value,
                                     InvalidRequest(f'Unknown event: {event}').to_dict())
            return
        try:
            if kind in REQUIRES_IDENTITY:
                self._identity(sid)
                if not isinstance(payload, dict):
                    raise InvalidRequest('payload must be an object')
            self._handlers[kind](sid, payload if payload is not None else {})
        except SessionError as exc:
            self.logger.info(f"[{kind.value}] sid={sid} rejected: {exc.code} ({exc.message})")
            self.relay.to_connection(sid, Outbound.ERROR.value, exc.to_dict())

    # ---- operations ----

    def authenticate(self, sid: str, token) -> Optional[int]:
        participant_id = self.verifier.verify(token)
        if participant_id is None:
            self.logger.info(f"[auth] sid={sid} rejected credential")
            self.relay.to_connection(sid, Outbound.AUTH_FAILED.value,
                                     {'message': 'Authentication failed'})
            return None
        with self._lock:
            ctx = self._connections.setdefault(sid, ConnectionContext(sid=sid))
            ctx.participant_id = participant_id
        self.logger.info(f"[auth] sid={sid} user={participant_id}")
        self.relay.to_connection(sid, Outbound.AUTHENTICATED.value, {'user_id': participant_id})
        return participant_id

    def join(self, sid: str, game_id: int, as_observer: bool = False) -> str:
        participant_id = self._identity(sid)
        game = self._fetch(game_id)

        opponent_joined = False
        if as_observer:
            role = OBSERVER
        elif participant_id == game.player1_id:
            role = WHITE
        elif participant_id == game.player2_id:
            role = BLACK
        elif game.player2_id is None and game.status == 'waiting':
            if self.store.claim_second_slot(game.id, participant_id):
                opponent_joined = True
            else:
                # Someone else took the seat first
                self.logger.info(f"[join] game={game.id} user={participant_id} lost the race for black")
            game = self._fetch(game.id)
            role = BLACK if game.player2_id == participant_id else OBSERVER
        else:
            role = OBSERVER

        if game.status in UNFINISHED:
            self._sync_seats(game)
            if role == OBSERVER:
                self.registry.add_observer(game.id, participant_id)
            else:
                self.registry.assign_role(game.id, participant_id, role)
        else:
            # Finished games only get a snapshot, no live roster
            self.registry.remove(game.id)

        self.relay.enter_room(sid, game.id)
        ctx = self.context(sid)
        if ctx is not None:
            ctx.game_ids.add(game.id)

        current_turn = side_to_move(game.moves)
        self.logger.info(f"[join] game={game.id} user={participant_id} role={role} turn={current_turn}")
        self.relay.to_connection(sid, Outbound.JOINED.value, {
            'game_id': game.id,
            'role': role,
            'seat': _seat_of(game, participant_id),
            'game': game.to_dict(),
            'current_turn': current_turn,
        })
        if opponent_joined:
            self.relay.to_room(game.id, Outbound.OPPONENT_JOINED.value, {
                'game_id': game.id,
                'opponent': {'id': participant_id},
            }, skip_sid=sid)
        self.relay.to_room(game.id, Outbound.PARTICIPANT_CONNECTED.value, {
            'game_id': game.id,
            'user_id': participant_id,
        }, skip_sid=sid)
        return role

    def move(self, sid: str, game_id: int, token: str) -> str:
        participant_id = self._identity(sid)
        game = self._fetch(game_id)
        if participant_id not in (game.player1_id, game.player2_id):
            raise NotAuthorized()

        is_white_turn = side_to_move(game.moves) == WHITE
        is_caller_white = participant_id == game.player1_id
        if is_white_turn != is_caller_white:
            raise OutOfTurn()

        new_moves = append_move(game.moves, token)
        if not self.store.append_move(game.id, game.moves, new_moves, participant_id, token):
            raise Conflict()

        self.logger.info(f"[move] game={game.id} user={participant_id} move={token}")
        self.relay.to_room(game.id, Outbound.MOVE_BROADCAST.value, {
            'game_id': game.id,
            'move': token,
            'moves': new_moves,
            'player_id': participant_id,
        })
        return new_moves

    def terminate(self, sid: str, game_id: int, outcome: str) -> None:
        participant_id = self._identity(sid)
        if outcome not in OUTCOMES:
            raise InvalidRequest(f"result must be one of: {', '.join(OUTCOMES)}")
        game = self._fetch(game_id)
        if participant_id not in (game.player1_id, game.player2_id):
            raise NotAuthorized()

        changes = stat_changes(outcome, game.player1_id, game.player2_id)
        if not self.store.finish_game(game.id, outcome, changes):
            raise Conflict('Game has already ended')

        self.logger.info(f"[end] game={game.id} user={participant_id} result={outcome}")
        self.relay.to_room(game.id, Outbound.SESSION_ENDED.value, {
            'game_id': game.id,
            'result': outcome,
        })
        self.registry.remove(game.id)

    def chat(self, sid: str, game_id: int, text: str) -> None:
        participant_id = self._identity(sid)
        self.logger.info(f"[chat] game={game_id} user={participant_id} chars={len(text)}")
        self.relay.to_room(game_id, Outbound.CHAT_BROADCAST.value, {
            'game_id': game_id,
            'user_id': participant_id,
            'message': text,
            'timestamp': self.clock(),
        })

    def disconnect(self, sid: str) -> None:
        with self._lock:
            ctx = self._connections.pop(sid, None)
        if ctx is None or ctx.participant_id is None:
            return
        participant_id = ctx.participant_id
        for game_id, side in self.registry.seated_in(participant_id).items():
            if self._still_present(participant_id, game_id):
                continue
            self.logger.info(f"[disconnect] game={game_id} user={participant_id} role={side}")
            self.relay.to_room(game_id, Outbound.PLAYER_DISCONNECTED.value, {
                'game_id': game_id,
                'user_id': participant_id,
                'role': side,
            }, skip_sid=sid)
        for game_id in self.registry.observing(participant_id):
            if not self._still_present(participant_id, game_id):
                self.registry.remove_observer(game_id, participant_id)

    def notify_opponent_joined(self, game) -> None:
        """Seat a second player who joined outside the socket and tell the room."""
        if game.id in self.registry:
            self._sync_seats(game)
        self.relay.to_room(game.id, Outbound.OPPONENT_JOINED.value, {
            'game_id': game.id,
            'opponent': {'id': game.player2_id},
        })

    # ---- inbound payload adapters ----

    def _on_authenticate(self, sid, payload):
        token = payload.get('token') if isinstance(payload, dict) else payload
        self.authenticate(sid, token)

    def _on_join(self, sid, payload):
        self.join(sid, _game_id(payload), bool(payload.get('as_spectator', False)))

    def _on_move(self, sid, payload):
        token = payload.get('move')
        if not isinstance(token, str) or not token.strip():
            raise InvalidRequest('move is required')
        token = token.strip()
        if len(token.split()) != 1 or len(token) > MAX_MOVE_LENGTH:
            raise InvalidRequest('move must be a single token')
        self.move(sid, _game_id(payload), token)

    def _on_terminate(self, sid, payload):
        self.terminate(sid, _game_id(payload), payload.get('result'))

    def _on_chat(self, sid, payload):
        text = payload.get('message')
        if not isinstance(text, str):
            raise InvalidRequest('message is required')
        self.chat(sid, _game_id(payload), text)

    def _on_ping(self, sid, payload):
        self.relay.to_connection(sid, Outbound.PONG.value, payload or {})

    # ---- helpers ----

    def _identity(self, sid) -> int:
        ctx = self.context(sid)
        if ctx is None or ctx.participant_id is None:
            raise NotAuthenticated()
        return ctx.participant_id

    def _fetch(self, game_id):
        game = self.store.fetch(game_id)
        if game is None:
            raise NotFound()
        return game

    def _sync_seats(self, game):
        # The stored game is authoritative for who holds each seat
        self.registry.set_seats(game.id, game.player1_id, game.player2_id)

    def _still_present(self, participant_id, game_id) -> bool:
        with self._lock:
            return any(
                c.participant_id == participant_id and game_id in c.game_ids
                for c in self._connections.values()
            )


def _seat_of(game, participant_id) -> Optional[str]:
    if participant_id == game.player1_id:
        return WHITE
    if participant_id == game.player2_id:
        return BLACK
    return None


def _game_id(payload) -> int:
    raw = payload.get('game_id') if isinstance(payload, dict) else None
    if isinstance(raw, bool):
        raise InvalidRequest('game_id is required')
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise InvalidRequest('game_id is required')
