"""
conftest.py
Shared helpers for generating Tak games and policies.
"""

import random
from typing import List, Tuple

import pytest

from tak.game import Color, Position
from tak.moves import Move


def is_finished(position: Position) -> bool:
    """Board full or a player out of pieces; win by road is not checked."""
    if all(position[square] is not None for square in position.squares()):
        return True
    return any(position.reserves(color) == (0, 0) for color in Color)


def random_game(size: int, plies: int, seed: int) -> List[Position]:
    """
    Play random legal moves from the empty board; return every position reached.

    The game stops before a full board or an exhausted reserve, so every
    returned position has at least one legal move.
    """
    rng = random.Random(seed)
    position = Position(size)
    positions = [position.copy()]
    for _ in range(plies):
        position.play(rng.choice(position.legal_moves()))
        if is_finished(position):
            break
        positions.append(position.copy())
    return positions


def random_policy(position: Position, seed: int) -> List[Tuple[Move, float]]:
    """Policy over the legal moves with a few dominant moves and a long tail."""
    rng = random.Random(seed)
    moves = position.legal_moves()
    weights = [rng.random() ** 8 for _ in moves]
    total = sum(weights)
    return [(move, w / total) for move, w in zip(moves, weights)]


@pytest.fixture
def game():
    return random_game


@pytest.fixture
def policy_for():
    return random_policy
