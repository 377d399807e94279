"""Whose move it is, derived from the move log.

The turn is never stored: the log is append-only, one token per move, so
its length parity is the side to move. White always moves first.
"""

WHITE = 'white'
BLACK = 'black'


def count_moves(moves) -> int:
    """Number of space separated tokens in a (possibly empty) move log."""
    if not moves:
        return 0
    return len(moves.split())


def side_to_move(moves) -> str:
    return WHITE if count_moves(moves) % 2 == 0 else BLACK


def append_move(moves, token: str) -> str:
    return f"{moves} {token}" if moves else token
