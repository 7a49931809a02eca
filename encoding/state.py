"""
state.py
Serialize a full Tak position as a packed bit sequence.

Encoding scheme (LSB-first bits, see encoding.bits):
- 1 bit: side to move (1 = White)
- For each square, row-major (row 0 first, then columns):
    - 1 bit: occupied. Nothing else follows for an empty square.
    - 1 bit: blocking (0 = flat, 1 = wall or capstone)
    - 1 bit if blocking: road (1 = capstone, 0 = wall)
    - 1 bit: tall stack (height > 1)
        - tall: 7 bits height, then 1 color bit per piece, top piece first
        - single piece: 1 color bit
  Color bits are 1 for White.
- Zero padding up to a whole byte
"""

from typing import Callable, List, Optional

from encoding.bits import BitReader, BitWriter
from encoding.move import CorruptStreamError
from tak.game import MAX_STACK_HEIGHT, Color, Position, Stack
from tak.moves import Piece

HEIGHT_BITS = 7


def write_state(position: Position) -> bytes:
    """
    Pack a position into bytes.

    Args:
        position: Position to serialize

    Returns:
        ceil(bits / 8) bytes

    Raises:
        ValueError: If a stack is 128 pieces or taller
    """
    bits = BitWriter()
    bits.push(position.to_move is Color.WHITE)

    for square in position.squares():
        stack = position[square]
        if stack is None:
            bits.push(False)
            continue
        bits.push(True)
        _write_piece(bits, stack.piece)

        if len(stack) > 1:
            if len(stack) > MAX_STACK_HEIGHT:
                raise ValueError(f"stack at {square} is {len(stack)} pieces tall")
            bits.push(True)
            bits.push_uint(len(stack), HEIGHT_BITS)
            for color in reversed(stack.colors):
                bits.push(color is Color.WHITE)
        else:
            bits.push(False)
            bits.push(stack.top_color is Color.WHITE)

    return bits.to_bytes()


def _write_piece(bits: BitWriter, piece: Piece) -> None:
    if piece is Piece.FLAT:
        bits.push(False)
    else:
        bits.push(True)
        bits.push(piece is Piece.CAP)


def read_state(next_byte: Callable[[], int], size: int) -> Position:
    """
    Unpack a position written by `write_state`.

    Args:
        next_byte: Returns the next byte of the stream on each call
        size: Board size

    Returns:
        Decoded Position, move number reconstructed from the piece count

    Raises:
        CorruptStreamError: If a tall stack has height below 2
    """
    bits = BitReader(next_byte)
    to_move = Color.WHITE if bits.next() else Color.BLACK

    board: List[List[Optional[Stack]]] = [[None] * size for _ in range(size)]
    for i in range(size * size):
        if not bits.next():
            continue

        if bits.next():
            piece = Piece.CAP if bits.next() else Piece.WALL
        else:
            piece = Piece.FLAT

        if bits.next():
            height = bits.next_uint(HEIGHT_BITS)
            if height < 2:
                raise CorruptStreamError(f"tall stack with height {height}")
            top_first = [_color(bits.next()) for _ in range(height)]
            colors = tuple(reversed(top_first))
        else:
            colors = (_color(bits.next()),)

        board[i // size][i % size] = Stack(piece, colors)

    return Position.from_board(board, to_move)


def _color(white: bool) -> Color:
    return Color.WHITE if white else Color.BLACK
