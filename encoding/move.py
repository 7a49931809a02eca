"""
move.py
Encode Tak moves as fixed 2-byte action codes.

Encoding scheme:
- Byte 1: 0x00 = terminal action (no move), 0xFF = placement,
  anything else = spread pattern mask
- Byte 2: bits 0-2 column, bits 3-5 row, bits 6-7 piece or direction
    - placement: 01 flat, 10 wall, 11 capstone
    - spread:    00 up, 01 down, 10 left, 11 right

The terminal action is a single 0x00 byte. It means "absolute state follows"
where a position is expected and "end of policy" inside a policy.
"""

from typing import Callable, Iterable, List, Optional

from tak.moves import Direction, Move, Pattern, Piece, Square

TERMINAL_ACTION = 0x00
PLACEMENT = 0xFF

PIECE_BITS = {Piece.FLAT: 0b01, Piece.WALL: 0b10, Piece.CAP: 0b11}
DIRECTION_BITS = {
    Direction.UP: 0b00,
    Direction.DOWN: 0b01,
    Direction.LEFT: 0b10,
    Direction.RIGHT: 0b11,
}
BITS_PIECE = {bits: piece for piece, bits in PIECE_BITS.items()}
BITS_DIRECTION = {bits: direction for direction, bits in DIRECTION_BITS.items()}


class CorruptStreamError(ValueError):
    """Raised when compressed bytes cannot describe a valid entry."""


def encode_move(move: Move) -> bytes:
    """
    Map a move to its 2-byte action code.

    Args:
        move: Placement or spread to encode

    Returns:
        Two bytes (kind, square | piece-or-direction)

    Raises:
        ValueError: If the square lies beyond row or column 7, or the
            spread pattern is 0x00 / 0xFF

    Examples:
        Sb3 -> bytes([0xFF, 0b10_010_001])
    """
    square = move.square
    if not (0 <= square.row < 8 and 0 <= square.column < 8):
        raise ValueError(
            f"square (column={square.column}, row={square.row}) cannot be encoded in 3-bit row/column"
        )
    square_bits = (square.row << 3) | square.column

    if move.is_placement():
        first = PLACEMENT
        last_two = PIECE_BITS[move.piece]
    else:
        first = move.pattern.mask
        if first in (TERMINAL_ACTION, PLACEMENT):
            raise ValueError(f"spread pattern {first:#04x} is not encodable")
        last_two = DIRECTION_BITS[move.direction]

    return bytes([first, (last_two << 6) | square_bits])


def encode_action(move: Optional[Move]) -> bytes:
    """Encode a move, or the 1-byte terminal action for None."""
    if move is None:
        return bytes([TERMINAL_ACTION])
    return encode_move(move)


def decode_move(first: int, second: int) -> Move:
    """
    Map a non-terminal 2-byte action code back to a move.

    Raises:
        CorruptStreamError: If `first` is the terminal action or a placement
            carries piece bits 00
    """
    if first == TERMINAL_ACTION:
        raise CorruptStreamError("terminal action has no move")
    square = Square(second & 0b111, (second >> 3) & 0b111)
    last_two = second >> 6
    if first == PLACEMENT:
        if last_two not in BITS_PIECE:
            raise CorruptStreamError(f"invalid placement piece bits {last_two:#04b}")
        return Move.place(square, BITS_PIECE[last_two])
    return Move.spread(square, BITS_DIRECTION[last_two], Pattern(first))


def read_action(next_byte: Callable[[], int]) -> Optional[Move]:
    """Read one action from a byte source. Returns None for the terminal action."""
    first = next_byte()
    if first == TERMINAL_ACTION:
        return None
    return decode_move(first, next_byte())


def move_index(move: Move) -> int:
    """
    Map a move to a u16 index (kind byte << 8 | second byte).

    Usage:
        Sparse policy targets in training.dataset index moves this way
    """
    first, second = encode_move(move)
    return (first << 8) | second


def move_indices(moves: Iterable[Move]) -> List[int]:
    return [move_index(move) for move in moves]
