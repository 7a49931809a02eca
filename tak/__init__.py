"""
tak package
Game rules and notation needed to replay Tak training targets.
"""

from tak.game import Color, IllegalMoveError, Position, Stack
from tak.moves import Direction, Move, ParseMoveError, Pattern, Piece, Square, parse_move
from tak.tps import ParseTpsError, format_tps, parse_tps

__all__ = [
    'Color', 'IllegalMoveError', 'Position', 'Stack',
    'Direction', 'Move', 'ParseMoveError', 'Pattern', 'Piece', 'Square', 'parse_move',
    'ParseTpsError', 'format_tps', 'parse_tps',
]
