"""
delta.py
Relative state prediction: find the move that turns one position into the next.
"""

from typing import Optional, Sequence

from tak.game import Position
from tak.moves import Move


def find_relative_move(
    previous: Position,
    previous_legal_moves: Sequence[Move],
    target: Position,
) -> Optional[Move]:
    """
    Find a legal move from `previous` that reproduces `target`.

    Args:
        previous: Position of the previous record
        previous_legal_moves: Legal moves of `previous`, in generation order
        target: Position to reach

    Returns:
        The first move (in generation order) whose result is board-equal to
        `target`, or None if no single move reaches it

    Note:
        Board equality ignores the move number, so a target parsed from text
        matches regardless of the counter it carries.
    """
    if previous.size != target.size or previous.to_move is target.to_move:
        return None
    for move in previous_legal_moves:
        candidate = previous.copy()
        candidate.play(move)
        if candidate == target:
            return move
    return None
