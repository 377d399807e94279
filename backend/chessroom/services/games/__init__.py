"""Game domain services: turn derivation and result bookkeeping.

This package contains pure domain logic that is imported by HTTP routes,
the persistence store and the socket coordinator, keeping transport
concerns separated from game mechanics.
"""

from .turns import WHITE, BLACK, count_moves, side_to_move, append_move
from .results import OUTCOMES, RATING_DELTAS, stat_changes

__all__ = [
    'WHITE', 'BLACK', 'count_moves', 'side_to_move', 'append_move',
    'OUTCOMES', 'RATING_DELTAS', 'stat_changes',
]
