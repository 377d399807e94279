"""Database access for games and player records.

The live coordinator never keeps game state of its own: it reads a fresh
``PersistedGame`` snapshot for every event and writes through the
conditional updates below. A conditional write that matches no row returns
False so the caller can tell a lost race from a database failure, which is
raised as ``PersistenceFailure``.
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import List, Optional
import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from chessroom import db
from chessroom.errors import PersistenceFailure
from chessroom.models import Game, GameMove, User
from chessroom.services.games import RATING_DELTAS, count_moves

logger = logging.getLogger(__name__)

UNFINISHED = ('waiting', 'active')


@dataclass(frozen=True)
class PersistedGame:
    id: int
    player1_id: int
    player2_id: Optional[int]
    status: str
    result: Optional[str]
    moves: str
    player1_username: Optional[str] = None
    player2_username: Optional[str] = None

    @classmethod
    def from_model(cls, game: Game) -> 'PersistedGame':
        return cls(
            id=game.id,
            player1_id=game.player1_id,
            player2_id=game.player2_id,
            status=game.status,
            result=game.result,
            moves=game.moves or '',
            player1_username=game.player1.username if game.player1 else None,
            player2_username=game.player2.username if game.player2 else None,
        )

    def to_dict(self):
        return asdict(self)


def _now():
    return datetime.now(timezone.utc)


class GameStore:

    def fetch(self, game_id) -> Optional[PersistedGame]:
        try:
            game = db.session.get(Game, game_id)
            return PersistedGame.from_model(game) if game else None
        except SQLAlchemyError as exc:
            self._fail('fetch', game_id, exc)

    def create_game(self, player1_id: int) -> PersistedGame:
        try:
            game = Game(player1_id=player1_id, status='waiting', moves='')
            db.session.add(game)
            db.session.commit()
            return PersistedGame.from_model(game)
        except SQLAlchemyError as exc:
            self._fail('create', player1_id, exc)

    def claim_second_slot(self, game_id, participant_id: int) -> bool:
        """Seat ``participant_id`` as the second player if the slot is still open."""
        try:
            changed = Game.query.filter(
                Game.id == game_id,
                Game.player2_id.is_(None),
                Game.status == 'waiting',
                Game.player1_id != participant_id,
            ).update(
                {'player2_id': participant_id, 'status': 'active', 'updated_at': _now()},
                synchronize_session=False,
            )
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail('claim', game_id, exc)
        db.session.expire_all()
        return changed > 0

    def append_move(self, game_id, expected_moves: str, new_moves: str,
                    participant_id: int, token: str) -> bool:
        """Replace the move log only if it still reads ``expected_moves``."""
        try:
            changed = Game.query.filter(
                Game.id == game_id,
                Game.moves == (expected_moves or ''),
            ).update(
                {'moves': new_moves, 'updated_at': _now()},
                synchronize_session=False,
            )
            if changed:
                db.session.add(GameMove(
                    game_id=game_id,
                    move_number=count_moves(new_moves),
                    player_id=participant_id,
                    move=token,
                ))
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail('append', game_id, exc)
        db.session.expire_all()
        return changed > 0

    def finish_game(self, game_id, outcome: str, changes=()) -> bool:
        """Record the result and every ``(participant_id, personal_result)``
        stats change in one transaction.

        Returns False without touching any row if the game already ended.
        """
        try:
            changed = Game.query.filter(
                Game.id == game_id,
                Game.status.in_(UNFINISHED),
            ).update(
                {'status': 'completed', 'result': outcome, 'updated_at': _now()},
                synchronize_session=False,
            )
            if changed:
                for participant_id, personal_result in changes:
                    self._bump_stats(participant_id, personal_result)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail('finish', game_id, exc)
        db.session.expire_all()
        return changed > 0

    def apply_stats_delta(self, participant_id: int, personal_result: str) -> bool:
        try:
            changed = self._bump_stats(participant_id, personal_result)
            db.session.commit()
        except SQLAlchemyError as exc:
            self._fail('stats', participant_id, exc)
        db.session.expire_all()
        return changed > 0

    def _bump_stats(self, participant_id, personal_result):
        column = {'win': User.wins, 'loss': User.losses, 'draw': User.draws}[personal_result]
        return User.query.filter(User.id == participant_id).update(
            {
                column: column + 1,
                User.rating: User.rating + RATING_DELTAS[personal_result],
                User.updated_at: _now(),
            },
            synchronize_session=False,
        )

    def available_games(self, limit: int = 20) -> List[PersistedGame]:
        games = (Game.query.filter_by(status='waiting')
                 .order_by(Game.created_at.desc(), Game.id.desc())
                 .limit(limit).all())
        return [PersistedGame.from_model(g) for g in games]

    def games_for_user(self, participant_id: int, limit: int = 10) -> List[PersistedGame]:
        games = (Game.query.filter(or_(Game.player1_id == participant_id,
                                       Game.player2_id == participant_id))
                 .order_by(Game.updated_at.desc(), Game.id.desc())
                 .limit(limit).all())
        return [PersistedGame.from_model(g) for g in games]

    def leaderboard(self, limit: int = 10) -> List[User]:
        return (User.query.filter((User.wins + User.losses + User.draws) > 0)
                .order_by(User.rating.desc(), User.wins.desc())
                .limit(limit).all())

    def _fail(self, action, key, exc):
        db.session.rollback()
        logger.error(f"[store-{action}] id={key} failed: {exc}")
        raise PersistenceFailure() from exc
