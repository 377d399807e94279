"""In-memory roster of live game sessions.

Entries exist only while a game is being played live and are dropped when
it ends or the process restarts. A lost entry is rebuilt from the stored
game's two player ids with an empty observer set.
"""
from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, List, Optional, Set

from chessroom.errors import Conflict
from chessroom.services.games import WHITE, BLACK


@dataclass
class SessionState:
    game_id: int
    white: Optional[int] = None
    black: Optional[int] = None
    observers: Set[int] = field(default_factory=set)

    def side_of(self, participant_id) -> Optional[str]:
        if participant_id is None:
            return None
        if self.white == participant_id:
            return WHITE
        if self.black == participant_id:
            return BLACK
        return None

    def members(self) -> List[int]:
        seated = [p for p in (self.white, self.black) if p is not None]
        return seated + sorted(self.observers)


class SessionRegistry:
    """Lock-guarded map of game id -> SessionState.

    A participant id appears at most once per session across the two
    seats and the observer set.
    """

    def __init__(self):
        self._sessions: Dict[int, SessionState] = {}
        self._lock = RLock()

    def get(self, game_id) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.get(game_id)

    def get_or_create(self, game_id, fallback_white=None, fallback_black=None) -> SessionState:
        with self._lock:
            state = self._sessions.get(game_id)
            if state is None:
                state = SessionState(game_id=game_id, white=fallback_white, black=fallback_black)
                self._sessions[game_id] = state
            return state

    def assign_role(self, game_id, participant_id, side) -> SessionState:
        if side not in (WHITE, BLACK):
            raise ValueError(f"unknown side: {side!r}")
        with self._lock:
            state = self.get_or_create(game_id)
            other = BLACK if side == WHITE else WHITE
            if getattr(state, other) == participant_id:
                raise Conflict(f"Participant {participant_id} already holds {other} in game {game_id}")
            setattr(state, side, participant_id)
            state.observers.discard(participant_id)
            return state

    def set_seats(self, game_id, white, black) -> SessionState:
        """Overwrite both seats; whoever now holds one stops observing."""
        with self._lock:
            state = self.get_or_create(game_id)
            state.white, state.black = white, black
            state.observers.difference_update(p for p in (white, black) if p is not None)
            return state

    def add_observer(self, game_id, participant_id) -> bool:
        """Add an observer; a seated participant keeps the seat. Returns True if added."""
        with self._lock:
            state = self.get_or_create(game_id)
            if state.side_of(participant_id) is not None or participant_id in state.observers:
                return False
            state.observers.add(participant_id)
            return True

    def remove_observer(self, game_id, participant_id) -> bool:
        with self._lock:
            state = self._sessions.get(game_id)
            if state is None or participant_id not in state.observers:
                return False
            state.observers.discard(participant_id)
            return True

    def remove(self, game_id) -> Optional[SessionState]:
        with self._lock:
            return self._sessions.pop(game_id, None)

    def seated_in(self, participant_id) -> Dict[int, str]:
        """Game id -> side for every session where the participant holds a seat."""
        with self._lock:
            return {
                gid: state.side_of(participant_id)
                for gid, state in self._sessions.items()
                if state.side_of(participant_id) is not None
            }

    def observing(self, participant_id) -> List[int]:
        with self._lock:
            return [gid for gid, state in self._sessions.items() if participant_id in state.observers]

    def __len__(self):
        with self._lock:
            return len(self._sessions)

    def __contains__(self, game_id):
        with self._lock:
            return game_id in self._sessions
