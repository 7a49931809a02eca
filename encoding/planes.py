"""
planes.py
Encode Tak positions as tensor planes for neural network input.

Encoding scheme (N×N planes):
- Planes 0-2: White top pieces (flat, wall, capstone)
- Planes 3-5: Black top pieces (flat, wall, capstone)
- Planes 6-(6+HIDDEN_DEPTH-1): White pieces 1..HIDDEN_DEPTH below the top
- Next HIDDEN_DEPTH planes: Black pieces below the top
- Last plane: Side to move (1=White, 0=Black)
"""

import torch

from tak.game import Color, Position
from tak.moves import Piece

HIDDEN_DEPTH = 7
NUM_PLANES = 6 + 2 * HIDDEN_DEPTH + 1

PIECE_TO_PLANE = {
    Piece.FLAT: 0,
    Piece.WALL: 1,
    Piece.CAP: 2,
}


def encode_board(position: Position) -> torch.Tensor:
    """
    Encode a position as a NUM_PLANES×N×N tensor.

    Args:
        position: Position to encode

    Returns:
        Tensor of shape [1, NUM_PLANES, N, N], dtype float32

    Invariant:
        Output is deterministic for board-equal positions
    """
    size = position.size
    planes = torch.zeros((NUM_PLANES, size, size), dtype=torch.float32)

    for square in position.squares():
        stack = position[square]
        if stack is None:
            continue
        row, column = square.row, square.column

        plane_idx = PIECE_TO_PLANE[stack.piece]
        if stack.top_color is Color.BLACK:
            plane_idx += 3
        planes[plane_idx, row, column] = 1.0

        # Owners below the top, nearest first
        below = stack.colors[-2::-1][:HIDDEN_DEPTH]
        for depth, color in enumerate(below):
            offset = 6 if color is Color.WHITE else 6 + HIDDEN_DEPTH
            planes[offset + depth, row, column] = 1.0

    if position.to_move is Color.WHITE:
        planes[-1, :, :] = 1.0

    return planes.unsqueeze(0)
