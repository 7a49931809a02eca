"""
quantize.py
Fixed-width quantizers for the value scalar and policy probabilities.

Value: [-1, 1] mapped linearly onto a u16.
Probability: ln(p) in [LOG_MIN, 0] mapped linearly onto a u16. Probabilities
below MIN_PROBABILITY are pruned and restored at the floor on decode.
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from tak.moves import Move

MIN_PROBABILITY = 1e-5
LOG_MIN = math.log(MIN_PROBABILITY)
U16_MAX = 0xFFFF


def _round_half_away(x: float) -> int:
    # Python's round() rounds half to even
    return int(math.floor(x + 0.5))


def encode_value(value: float) -> int:
    """
    Quantize a value in [-1, 1] to a u16.

    Raises:
        ValueError: If value is outside [-1, 1] or NaN
    """
    if not -1.0 <= value <= 1.0:
        raise ValueError(f"value {value} is outside [-1, 1]")
    return _round_half_away((value + 1.0) / 2.0 * U16_MAX)


def decode_value(compressed: int) -> float:
    if not 0 <= compressed <= U16_MAX:
        raise ValueError(f"compressed value {compressed} is not a u16")
    return compressed / U16_MAX * 2.0 - 1.0


def encode_probability(probability: float) -> Optional[int]:
    """
    Quantize a probability on a log scale.

    Args:
        probability: Policy probability

    Returns:
        u16 code, or None if the probability is below MIN_PROBABILITY
        and should be pruned

    Raises:
        ValueError: If ln(probability) is above 0
    """
    if probability < MIN_PROBABILITY:
        return None
    log_prob = math.log(probability)
    if not LOG_MIN <= log_prob <= 0.0:
        raise ValueError(f"probability {probability} is outside [{MIN_PROBABILITY}, 1]")
    return _round_half_away(log_prob / LOG_MIN * U16_MAX)


def decode_probability(compressed: int) -> float:
    if not 0 <= compressed <= U16_MAX:
        raise ValueError(f"compressed probability {compressed} is not a u16")
    return math.exp(compressed * LOG_MIN / U16_MAX)


def complete_policy(
    decoded: Sequence[Tuple[Move, float]],
    legal_moves: Sequence[Move],
) -> List[Tuple[Move, float]]:
    """
    Expand a decoded policy to the full legal-move set and renormalize.

    Legal moves missing from `decoded` get MIN_PROBABILITY before
    renormalization. Decoded moves that are not legal are dropped.

    Args:
        decoded: (move, probability) pairs read from the stream
        legal_moves: Legal moves of the position, in generation order

    Returns:
        (move, probability) for every legal move, summing to 1
    """
    if not legal_moves:
        return []
    known = dict(decoded)
    probs = np.array([known.get(move, MIN_PROBABILITY) for move in legal_moves], dtype=np.float64)
    probs /= probs.sum()
    return list(zip(legal_moves, probs.tolist()))
