"""
moves.py
Squares, directions, drop patterns and moves, with PTN-style move notation.

Notation:
- Placements: "a1" (flat), "Sa1" (wall), "Ca1" (capstone). "Fa1" is accepted.
- Spreads: "[count]<square><direction>[drops]", e.g. "a1+", "3c3<21".
  The count is omitted when 1 and the drops are omitted for a single drop.
  A trailing "*" (wall crush marker) is accepted and ignored.
"""

from enum import Enum
from typing import Iterator, List, Optional, Sequence

MAX_SIZE = 8
COLUMNS = "abcdefgh"


class ParseMoveError(ValueError):
    """Raised when move notation cannot be parsed."""


class Piece(Enum):
    FLAT = "F"
    WALL = "S"
    CAP = "C"

    def is_blocking(self) -> bool:
        return self is not Piece.FLAT

    def is_road(self) -> bool:
        return self is not Piece.WALL


class Direction(Enum):
    UP = "+"
    DOWN = "-"
    LEFT = "<"
    RIGHT = ">"

    @property
    def offset(self):
        """(column, row) step for one square in this direction."""
        return _OFFSETS[self]


_OFFSETS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# Generation order of spread directions
DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


class Square:
    """A board square, 0-based. "a1" is column 0, row 0."""

    __slots__ = ("column", "row")

    def __init__(self, column: int, row: int):
        self.column = column
        self.row = row

    @classmethod
    def parse(cls, text: str) -> "Square":
        if len(text) != 2 or text[0] not in COLUMNS or not text[1].isdigit():
            raise ParseMoveError(f"invalid square: {text!r}")
        row = int(text[1]) - 1
        if not 0 <= row < MAX_SIZE:
            raise ParseMoveError(f"invalid square: {text!r}")
        return cls(COLUMNS.index(text[0]), row)

    def step(self, direction: Direction, distance: int = 1) -> "Square":
        dc, dr = direction.offset
        return Square(self.column + dc * distance, self.row + dr * distance)

    def on_board(self, size: int) -> bool:
        return 0 <= self.column < size and 0 <= self.row < size

    def __eq__(self, other) -> bool:
        if not isinstance(other, Square):
            return NotImplemented
        return self.column == other.column and self.row == other.row

    def __hash__(self) -> int:
        return hash((self.column, self.row))

    def __str__(self) -> str:
        if 0 <= self.column < len(COLUMNS):
            return f"{COLUMNS[self.column]}{self.row + 1}"
        return f"({self.column}, {self.row})"

    def __repr__(self) -> str:
        return f"Square({self})"


class Pattern:
    """
    Drop pattern of a spread, stored as a bitmask.

    Carrying k pieces uses the top k bits of the byte: the i-th carried piece
    (1-based, the first one to be dropped) lives at bit 8 - i. A set bit marks
    the last piece of one drop, so the lowest set bit is always the k-th piece.

    Examples:
        drops [1]       -> 0b1000_0000
        drops [2, 1]    -> 0b0110_0000
        drops [1, 1, 2] -> 0b1101_0000
    """

    __slots__ = ("mask",)

    def __init__(self, mask: int):
        if not 0 < mask < 0x100:
            raise ValueError(f"pattern mask out of range: {mask:#x}")
        self.mask = mask

    @classmethod
    def from_drop_counts(cls, drops: Sequence[int]) -> "Pattern":
        if not drops or any(d < 1 for d in drops) or sum(drops) > MAX_SIZE:
            raise ValueError(f"invalid drop counts: {list(drops)}")
        mask = 0
        carried = 0
        for drop in drops:
            carried += drop
            mask |= 1 << (8 - carried)
        return cls(mask)

    def count_pieces(self) -> int:
        return 8 - (self.mask & -self.mask).bit_length() + 1

    def count_squares(self) -> int:
        return bin(self.mask).count("1")

    def drop_counts(self) -> List[int]:
        drops = []
        last = 0
        for i in range(1, self.count_pieces() + 1):
            if self.mask & (1 << (8 - i)):
                drops.append(i - last)
                last = i
        return drops

    def __eq__(self, other) -> bool:
        if not isinstance(other, Pattern):
            return NotImplemented
        return self.mask == other.mask

    def __hash__(self) -> int:
        return hash(self.mask)

    def __repr__(self) -> str:
        return f"Pattern({self.mask:#04x})"


def patterns_for(count: int) -> Iterator[Pattern]:
    """Yield every pattern carrying `count` pieces, in increasing mask order."""
    last = 1 << (8 - count)
    for high in range(1 << (count - 1)):
        yield Pattern((high << (9 - count)) | last)


class Move:
    """A placement or a spread."""

    __slots__ = ("square", "piece", "direction", "pattern")

    def __init__(
        self,
        square: Square,
        piece: Optional[Piece] = None,
        direction: Optional[Direction] = None,
        pattern: Optional[Pattern] = None,
    ):
        self.square = square
        self.piece = piece
        self.direction = direction
        self.pattern = pattern

    @classmethod
    def place(cls, square: Square, piece: Piece = Piece.FLAT) -> "Move":
        return cls(square, piece=piece)

    @classmethod
    def spread(cls, square: Square, direction: Direction, pattern: Pattern) -> "Move":
        return cls(square, direction=direction, pattern=pattern)

    def is_placement(self) -> bool:
        return self.piece is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, Move):
            return NotImplemented
        return (
            self.square == other.square
            and self.piece == other.piece
            and self.direction == other.direction
            and self.pattern == other.pattern
        )

    def __hash__(self) -> int:
        return hash((self.square, self.piece, self.direction, self.pattern))

    def __str__(self) -> str:
        if self.is_placement():
            prefix = "" if self.piece is Piece.FLAT else self.piece.value
            return f"{prefix}{self.square}"
        drops = self.pattern.drop_counts()
        count = self.pattern.count_pieces()
        text = f"{count if count > 1 else ''}{self.square}{self.direction.value}"
        if len(drops) > 1:
            text += "".join(str(d) for d in drops)
        return text

    def __repr__(self) -> str:
        return f"Move({self})"


def parse_move(text: str) -> Move:
    """
    Parse a move from notation.

    Args:
        text: Move notation, e.g. "Sc3" or "3a1>21"

    Returns:
        Parsed Move

    Raises:
        ParseMoveError: If the notation is malformed
    """
    s = text.strip().rstrip("*")
    if not s:
        raise ParseMoveError("empty move")

    if s[0] in "FSC":
        return Move.place(Square.parse(s[1:]), Piece(s[0]))

    if len(s) == 2:
        return Move.place(Square.parse(s), Piece.FLAT)

    count = 1
    if s[0].isdigit():
        count = int(s[0])
        s = s[1:]
    if len(s) < 3:
        raise ParseMoveError(f"invalid move: {text!r}")

    square = Square.parse(s[:2])
    try:
        direction = Direction(s[2])
    except ValueError:
        raise ParseMoveError(f"invalid direction in move: {text!r}") from None

    rest = s[3:]
    if rest:
        if not rest.isdigit():
            raise ParseMoveError(f"invalid drop counts in move: {text!r}")
        drops = [int(c) for c in rest]
    else:
        drops = [count]
    if count < 1 or sum(drops) != count or 0 in drops:
        raise ParseMoveError(f"drop counts do not match carry in move: {text!r}")
    try:
        pattern = Pattern.from_drop_counts(drops)
    except ValueError as err:
        raise ParseMoveError(f"invalid move {text!r}: {err}") from None
    return Move.spread(square, direction, pattern)
