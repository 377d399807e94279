from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required, current_user
from chessroom import db
from chessroom.models import User
from chessroom.store import GameStore

users = Blueprint('users', __name__)


@users.route('/profile', methods=['GET'])
@login_required
def profile():
    return jsonify({'user': current_user.to_dict(include_email=True)})


@users.route('/leaderboard/top', methods=['GET'])
def leaderboard():
    default_limit = int(current_app.config.get('LEADERBOARD_DEFAULT_LIMIT', 10))
    limit = request.args.get('limit', default_limit, type=int)
    if not limit or limit < 1:
        limit = default_limit
    rows = GameStore().leaderboard(min(limit, 100))
    return jsonify({'leaderboard': [
        dict(u.to_dict(), totalGames=u.total_games) for u in rows
    ]})


@users.route('/<int:user_id>', methods=['GET'])
def get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404
    # Public profile: no email for other users
    return jsonify({'user': user.to_dict()})
