from typing import List, Tuple

WHITE_WINS = 'white_wins'
BLACK_WINS = 'black_wins'
DRAW = 'draw'
ABANDONED = 'abandoned'

OUTCOMES = (WHITE_WINS, BLACK_WINS, DRAW, ABANDONED)

# Rating change per personal result
RATING_DELTAS = {'win': 25, 'loss': -15, 'draw': 5}


def stat_changes(outcome: str, white_id, black_id) -> List[Tuple[int, str]]:
    """Personal results to record for a finished game.

    Returns ``(participant_id, 'win'|'loss'|'draw')`` pairs. Nothing is
    recorded for an abandoned game or one that never got a second player.
    """
    if outcome not in OUTCOMES:
        raise ValueError(f"unknown outcome: {outcome!r}")
    if white_id is None or black_id is None:
        return []
    if outcome == WHITE_WINS:
        return [(white_id, 'win'), (black_id, 'loss')]
    if outcome == BLACK_WINS:
        return [(white_id, 'loss'), (black_id, 'win')]
    if outcome == DRAW:
        return [(white_id, 'draw'), (black_id, 'draw')]
    return []
