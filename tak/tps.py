"""
tps.py
Tak Positional System (TPS) notation for positions.

Example (3x3, White to move on move 2):
    "x3/x,2,x/1,x2 1 2"

Rows are listed from the top row down to row 1. Each square is "x" (or
"xK" for K empty squares) or a stack of owner digits from bottom to top,
optionally suffixed by "S" (wall) or "C" (capstone).
"""

from typing import List, Optional

from tak.game import MAX_STACK_HEIGHT, Color, Position, Stack, STARTING_RESERVES
from tak.moves import Piece


class ParseTpsError(ValueError):
    """Raised when TPS notation cannot be parsed."""


def parse_tps(text: str) -> Position:
    """
    Parse a position from TPS.

    Args:
        text: TPS string "<rows> <color> <move number>"

    Returns:
        Parsed Position

    Raises:
        ParseTpsError: If the notation is malformed
    """
    parts = text.strip().split()
    if len(parts) != 3:
        raise ParseTpsError(f"expected board, color and move number: {text!r}")
    rows_text, color_text, number_text = parts

    if color_text not in ("1", "2"):
        raise ParseTpsError(f"invalid color to move: {color_text!r}")
    if not number_text.isdigit() or int(number_text) < 1:
        raise ParseTpsError(f"invalid move number: {number_text!r}")

    rows = rows_text.split("/")
    size = len(rows)
    if size not in STARTING_RESERVES:
        raise ParseTpsError(f"unsupported board size {size}")

    board: List[List[Optional[Stack]]] = []
    # TPS lists the top row first
    for row_text in reversed(rows):
        row = _parse_row(row_text)
        if len(row) != size:
            raise ParseTpsError(f"row {row_text!r} does not have {size} squares")
        board.append(row)

    return Position(size, board, Color(int(color_text)), int(number_text))


def _parse_row(text: str) -> List[Optional[Stack]]:
    row: List[Optional[Stack]] = []
    for square in text.split(","):
        if not square:
            raise ParseTpsError(f"empty square in row {text!r}")
        if square[0] == "x":
            count = square[1:]
            if count and not count.isdigit():
                raise ParseTpsError(f"invalid empty run {square!r}")
            row.extend([None] * (int(count) if count else 1))
        else:
            row.append(_parse_stack(square))
    return row


def _parse_stack(text: str) -> Stack:
    piece = Piece.FLAT
    digits = text
    if text[-1] in "SC":
        piece = Piece(text[-1])
        digits = text[:-1]
    if not digits or any(c not in "12" for c in digits):
        raise ParseTpsError(f"invalid stack {text!r}")
    if len(digits) > MAX_STACK_HEIGHT:
        raise ParseTpsError(f"stack {text!r} is too tall")
    return Stack(piece, tuple(Color(int(c)) for c in digits))


def format_tps(position: Position) -> str:
    """Format a position as TPS, collapsing runs of empty squares."""
    rows = []
    for row in reversed(position.board):
        squares = []
        empty = 0
        for stack in row:
            if stack is None:
                empty += 1
                continue
            if empty:
                squares.append(_format_empty(empty))
                empty = 0
            suffix = "" if stack.piece is Piece.FLAT else stack.piece.value
            squares.append("".join(str(c.value) for c in stack.colors) + suffix)
        if empty:
            squares.append(_format_empty(empty))
        rows.append(",".join(squares))
    return f"{'/'.join(rows)} {position.to_move.value} {position.move_number}"


def _format_empty(count: int) -> str:
    return "x" if count == 1 else f"x{count}"
