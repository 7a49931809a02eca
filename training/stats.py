"""
stats.py
Compare original targets with their decompressed counterparts.

Reports the squared value error and the KL divergence of the policies per
line, with running means over the file.
"""

from typing import Iterable, Iterator, NamedTuple, Sequence, Tuple

import numpy as np

from tak.moves import Move
from training.config import KL_EPSILON
from training.targets import parse_target


class ComparisonRow(NamedTuple):
    index: int
    value_loss: float
    mean_value_loss: float
    kl_divergence: float
    mean_kl_divergence: float


def update_mean(mean: float, new: float, i: int) -> float:
    """Incremental mean after adding the i-th (0-based) sample."""
    return mean + (new - mean) / (i + 1)


def kl_divergence(p: Sequence[Tuple[Move, float]], q: Sequence[Tuple[Move, float]]) -> float:
    """
    KL(p || q) between two policies over the same moves.

    Raises:
        ValueError: If the policies list different moves or orders
    """
    if len(p) != len(q) or any(a != b for (a, _), (b, _) in zip(p, q)):
        raise ValueError("policies do not list the same moves")
    if not p:
        return 0.0
    p_x = np.maximum(np.array([x for _, x in p], dtype=np.float64), KL_EPSILON)
    q_x = np.maximum(np.array([x for _, x in q], dtype=np.float64), KL_EPSILON)
    return float(np.sum(p_x * np.log(p_x / q_x)))


def compare_lines(original: Iterable[str], converted: Iterable[str]) -> Iterator[ComparisonRow]:
    """
    Compare aligned target lines.

    Yields:
        One ComparisonRow per line pair

    Raises:
        ValueError: If a pair disagrees on the board or side to move, or a
            line cannot be parsed
    """
    mean_value_loss = 0.0
    mean_kl = 0.0
    for i, (og, cv) in enumerate(zip(original, converted)):
        og_target = parse_target(og)
        cv_target = parse_target(cv)
        if og_target.position != cv_target.position:
            raise ValueError(f"line {i}: positions differ")

        value_loss = (og_target.value - cv_target.value) ** 2
        mean_value_loss = update_mean(mean_value_loss, value_loss, i)

        kl = kl_divergence(og_target.policy, cv_target.policy)
        mean_kl = update_mean(mean_kl, kl, i)

        yield ComparisonRow(i, value_loss, mean_value_loss, kl, mean_kl)
