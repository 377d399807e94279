from flask import Blueprint, current_app, jsonify
from flask_login import login_required, current_user
from chessroom.errors import PersistenceFailure
from chessroom.models import Game
from chessroom.services.games import side_to_move
from chessroom.store import GameStore

games = Blueprint('games', __name__)


def _game_payload(game):
    payload = game.to_dict()
    payload['current_turn'] = side_to_move(game.moves)
    return payload


@games.route('/create', methods=['POST'])
@login_required
def create_game():
    """
    Creates a new game and seats the current user as white.
    """
    try:
        game = GameStore().create_game(current_user.id)
    except PersistenceFailure:
        return jsonify({'error': 'Failed to create game'}), 500
    current_app.logger.info(f"[create] game={game.id} user={current_user.id}")
    return jsonify({
        'message': 'Game created successfully',
        'game': _game_payload(game),
    }), 201


@games.route('/', methods=['GET'])
def available_games():
    """
    Lists games that are still waiting for a second player.
    """
    limit = int(current_app.config.get('AVAILABLE_GAMES_LIMIT', 20))
    return jsonify({'games': [g.to_dict() for g in GameStore().available_games(limit)]})


@games.route('/user/my-games', methods=['GET'])
@login_required
def my_games():
    limit = int(current_app.config.get('USER_GAMES_LIMIT', 10))
    return jsonify({'games': [g.to_dict() for g in GameStore().games_for_user(current_user.id, limit)]})


@games.route('/<int:game_id>', methods=['GET'])
@login_required
def get_game(game_id):
    game = GameStore().fetch(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify({'game': _game_payload(game)})


@games.route('/<int:game_id>/history', methods=['GET'])
@login_required
def get_history(game_id):
    """
    Returns the recorded move history of a game, oldest first.
    """
    game = Game.query.filter_by(id=game_id).first_or_404()
    return jsonify({'game_id': game.id, 'moves': [m.to_dict() for m in game.history]})


@games.route('/<int:game_id>/join', methods=['POST'])
@login_required
def join_game(game_id):
    """
    Takes the second (black) seat of a waiting game.
    """
    store = GameStore()
    game = store.fetch(game_id)
    if not game:
        return jsonify({'error': 'Game not found'}), 404
    if game.status != 'waiting':
        return jsonify({'error': 'Game is not available to join'}), 400
    if game.player1_id == current_user.id:
        return jsonify({'error': 'Cannot join your own game'}), 400
    if game.player2_id:
        return jsonify({'error': 'Game is already full'}), 400

    try:
        joined = store.claim_second_slot(game.id, current_user.id)
    except PersistenceFailure:
        return jsonify({'error': 'Failed to join game'}), 500
    if not joined:
        return jsonify({'error': 'Game is already full'}), 409

    updated = store.fetch(game.id)
    current_app.logger.info(f"[join-http] game={game.id} user={current_user.id}")
    current_app.extensions['coordinator'].notify_opponent_joined(updated)
    return jsonify({
        'message': 'Joined game successfully',
        'game': _game_payload(updated),
    })
