from chessroom import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    draws = db.Column(db.Integer, default=0, nullable=False)
    rating = db.Column(db.Integer, default=1200, nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    @property
    def total_games(self):
        return (self.wins or 0) + (self.losses or 0) + (self.draws or 0)

    def to_dict(self, include_email=False):
        data = {
            'id': self.id,
            'username': self.username,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'rating': self.rating,
        }
        if include_email:
            data['email'] = self.email
        return data


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    player1_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    player2_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True, index=True)
    status = db.Column(db.String(16), default='waiting', nullable=False) # waiting, active, completed, abandoned
    result = db.Column(db.String(16), nullable=True) # white_wins, black_wins, draw, abandoned
    # Space separated move tokens, append-only
    moves = db.Column(db.Text, default='', nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    player1 = db.relationship('User', foreign_keys=[player1_id])
    player2 = db.relationship('User', foreign_keys=[player2_id])
    history = db.relationship('GameMove', back_populates='game', lazy='dynamic', order_by='GameMove.move_number')


class GameMove(db.Model):
    """One accepted move, kept alongside the game's move log for history."""
    __tablename__ = 'game_move'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    move_number = db.Column(db.Integer, nullable=False)
    player_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    move = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow)

    game = db.relationship('Game', back_populates='history')

    def to_dict(self):
        return {
            'move_number': self.move_number,
            'player_id': self.player_id,
            'move': self.move,
        }
