"""
game.py
Tak positions: board, stacks, reserves, move application and legal-move generation.

Only the rules needed to replay training data are implemented. There is no
win detection and no scoring.
"""

from enum import Enum
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from tak.moves import DIRECTIONS, Direction, Move, Piece, Square, patterns_for

MIN_SIZE = 3
MAX_SIZE = 8
MAX_STACK_HEIGHT = 127

# Board size -> (stones, capstones) per player
STARTING_RESERVES: Dict[int, Tuple[int, int]] = {
    3: (10, 0),
    4: (15, 0),
    5: (21, 1),
    6: (30, 1),
    7: (40, 2),
    8: (50, 2),
}


class IllegalMoveError(ValueError):
    """Raised when a move cannot be played on a position."""


class Color(Enum):
    WHITE = 1
    BLACK = 2

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class Stack(NamedTuple):
    """A non-empty stack. `colors` runs from the bottom piece to the top piece."""

    piece: Piece
    colors: Tuple[Color, ...]

    @property
    def top_color(self) -> Color:
        return self.colors[-1]

    def __len__(self) -> int:
        return len(self.colors)


class Position:
    """
    A Tak position: N×N board of optional stacks plus the side to move.

    Equality is board equality: size, square contents and side to move.
    The move number is carried for notation only and is ignored by `==`.
    """

    def __init__(
        self,
        size: int,
        board: Optional[List[List[Optional[Stack]]]] = None,
        to_move: Color = Color.WHITE,
        move_number: int = 1,
    ):
        if size not in STARTING_RESERVES:
            raise ValueError(f"Unsupported board size {size}")
        self.size = size
        self.board = board if board is not None else [[None] * size for _ in range(size)]
        self.to_move = to_move
        self.move_number = move_number

    @classmethod
    def from_board(cls, board: List[List[Optional[Stack]]], to_move: Color) -> "Position":
        """
        Build a position from a bare board, reconstructing the move number.

        The move number is not recoverable from the board, so the smallest
        ply count consistent with the pieces placed and the side to move is used.
        """
        position = cls(len(board), board, to_move)
        ply = position.count_pieces()
        if (ply % 2 == 0) != (to_move is Color.WHITE):
            ply += 1
        position.move_number = ply // 2 + 1
        return position

    def __getitem__(self, square: Square) -> Optional[Stack]:
        return self.board[square.row][square.column]

    def __setitem__(self, square: Square, stack: Optional[Stack]) -> None:
        self.board[square.row][square.column] = stack

    def __eq__(self, other) -> bool:
        if not isinstance(other, Position):
            return NotImplemented
        return (
            self.size == other.size
            and self.to_move == other.to_move
            and self.board == other.board
        )

    def __repr__(self) -> str:
        from tak.tps import format_tps
        return f"Position({format_tps(self)!r})"

    def copy(self) -> "Position":
        return Position(self.size, [row[:] for row in self.board], self.to_move, self.move_number)

    def squares(self) -> Iterator[Square]:
        """Squares in row-major order (row 0 first)."""
        for row in range(self.size):
            for column in range(self.size):
                yield Square(column, row)

    def count_pieces(self, color: Optional[Color] = None) -> int:
        total = 0
        for row in self.board:
            for stack in row:
                if stack is None:
                    continue
                if color is None:
                    total += len(stack)
                else:
                    total += sum(1 for c in stack.colors if c is color)
        return total

    def reserves(self, color: Color) -> Tuple[int, int]:
        """Remaining (stones, capstones) of `color`, derived from the board."""
        stones, caps = STARTING_RESERVES[self.size]
        caps_used = sum(
            1
            for row in self.board
            for stack in row
            if stack is not None and stack.piece is Piece.CAP and stack.top_color is color
        )
        stones_used = self.count_pieces(color) - caps_used
        return max(stones - stones_used, 0), max(caps - caps_used, 0)

    def is_opening(self) -> bool:
        """True during the first two plies, when each side places an opposing flat."""
        return self.count_pieces() < 2

    # ------------------------------------------------------------------
    # Move generation

    def legal_moves(self) -> List[Move]:
        """
        Generate all legal moves in a fixed order.

        Order:
            Squares column by column (a1, a2, ..., b1, ...). Empty squares
            yield placements (flat, wall, capstone). Stacks controlled by the
            side to move yield spreads by carry count, then direction
            (up, down, left, right), then pattern mask.

        Returns:
            List of legal moves
        """
        moves: List[Move] = []
        opening = self.is_opening()
        stones, caps = self.reserves(self.to_move)

        for column in range(self.size):
            for row in range(self.size):
                square = Square(column, row)
                stack = self[square]
                if stack is None:
                    if opening:
                        moves.append(Move.place(square, Piece.FLAT))
                        continue
                    if stones > 0:
                        moves.append(Move.place(square, Piece.FLAT))
                        moves.append(Move.place(square, Piece.WALL))
                    if caps > 0:
                        moves.append(Move.place(square, Piece.CAP))
                elif not opening and stack.top_color is self.to_move:
                    self._generate_spreads(square, stack, moves)
        return moves

    def _generate_spreads(self, square: Square, stack: Stack, moves: List[Move]) -> None:
        reach = {d: self._reach(square, d, stack.piece is Piece.CAP) for d in DIRECTIONS}
        for count in range(1, min(len(stack), self.size) + 1):
            for direction in DIRECTIONS:
                distance, crush = reach[direction]
                if distance == 0 and not crush:
                    continue
                for pattern in patterns_for(count):
                    squares = pattern.count_squares()
                    if squares <= distance:
                        moves.append(Move.spread(square, direction, pattern))
                    elif crush and squares == distance + 1 and pattern.drop_counts()[-1] == 1:
                        moves.append(Move.spread(square, direction, pattern))

    def _reach(self, square: Square, direction: Direction, cap_on_top: bool) -> Tuple[int, bool]:
        """Count open squares in a direction and whether a wall beyond them can be crushed."""
        distance = 0
        current = square.step(direction)
        while current.on_board(self.size):
            stack = self[current]
            if stack is not None and stack.piece.is_blocking():
                return distance, cap_on_top and stack.piece is Piece.WALL
            distance += 1
            current = current.step(direction)
        return distance, False

    # ------------------------------------------------------------------
    # Move application

    def play(self, move: Move) -> None:
        """
        Apply a move in place and pass the turn.

        Raises:
            IllegalMoveError: If the move is not legal here. The position is
                left unchanged in that case.
        """
        if not move.square.on_board(self.size):
            raise IllegalMoveError(f"{move} is off a {self.size}x{self.size} board")
        if move.is_placement():
            updates = self._placement_updates(move)
        else:
            updates = self._spread_updates(move)

        for square, stack in updates.items():
            self[square] = stack
        if self.to_move is Color.BLACK:
            self.move_number += 1
        self.to_move = self.to_move.opponent

    def _placement_updates(self, move: Move) -> Dict[Square, Optional[Stack]]:
        if self[move.square] is not None:
            raise IllegalMoveError(f"{move}: square is occupied")
        color = self.to_move
        if self.is_opening():
            if move.piece is not Piece.FLAT:
                raise IllegalMoveError(f"{move}: only flats may be placed in the opening")
            color = color.opponent
        else:
            stones, caps = self.reserves(color)
            available = caps if move.piece is Piece.CAP else stones
            if available <= 0:
                raise IllegalMoveError(f"{move}: no {move.piece.name.lower()} left in reserve")
        return {move.square: Stack(move.piece, (color,))}

    def _spread_updates(self, move: Move) -> Dict[Square, Optional[Stack]]:
        stack = self[move.square]
        if stack is None:
            raise IllegalMoveError(f"{move}: square is empty")
        if self.is_opening():
            raise IllegalMoveError(f"{move}: spreads are not allowed in the opening")
        if stack.top_color is not self.to_move:
            raise IllegalMoveError(f"{move}: stack is not controlled by the side to move")
        count = move.pattern.count_pieces()
        if count > len(stack) or count > self.size:
            raise IllegalMoveError(f"{move}: cannot carry {count} pieces")

        carried = stack.colors[-count:]
        remaining = stack.colors[:-count]
        updates: Dict[Square, Optional[Stack]] = {
            move.square: Stack(Piece.FLAT, remaining) if remaining else None
        }

        drops = move.pattern.drop_counts()
        for i, drop in enumerate(drops):
            target = move.square.step(move.direction, i + 1)
            if not target.on_board(self.size):
                raise IllegalMoveError(f"{move}: spreads off the board")
            last = i == len(drops) - 1
            existing = self[target]
            if existing is not None and existing.piece is Piece.CAP:
                raise IllegalMoveError(f"{move}: blocked by a capstone at {target}")
            if existing is not None and existing.piece is Piece.WALL:
                if not (last and drop == 1 and stack.piece is Piece.CAP):
                    raise IllegalMoveError(f"{move}: blocked by a wall at {target}")
            below = existing.colors if existing is not None else ()
            height = len(below) + drop
            if height > MAX_STACK_HEIGHT:
                raise IllegalMoveError(f"{move}: stack at {target} would exceed {MAX_STACK_HEIGHT}")
            piece = stack.piece if last else Piece.FLAT
            updates[target] = Stack(piece, below + carried[:drop])
            carried = carried[drop:]
        return updates
