"""
targets.py
Training targets and their text notation.

Line format:
    <tps>;<value>;[<ube>;]<policy>
    policy = <move>:<probability>,<move>:<probability>,...

Example:
    "x3/x3/x3 1 1;0.25;a1:0.5,a2:0.25,..."
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from tak.game import Position
from tak.moves import Move, ParseMoveError, parse_move
from tak.tps import ParseTpsError, format_tps, parse_tps


class ParseTargetError(ValueError):
    """Raised when a target line cannot be parsed."""


class Target:
    """Single training target: position, value, optional uncertainty and policy."""

    def __init__(
        self,
        position: Position,
        value: float,
        policy: List[Tuple[Move, float]],
        ube: Optional[float] = None
    ):
        """
        Args:
            position: Board position
            value: Expected outcome in [-1, 1] for the side to move
            policy: (move, probability) pairs in legal-move generation order
            ube: Uncertainty of the value estimate, if recorded
        """
        self.position = position
        self.value = value
        self.policy = policy
        self.ube = ube

    def actions_match_policy(self, real_actions: Sequence[Move]) -> bool:
        """True if the policy lists exactly `real_actions`, in the same order."""
        return len(self.policy) == len(real_actions) and all(
            move == real for (move, _), real in zip(self.policy, real_actions)
        )

    def __repr__(self) -> str:
        return f"Target({format_target(self)!r})"


def parse_target(line: str, size: Optional[int] = None) -> Target:
    """
    Parse one target line.

    Args:
        line: Target in text notation
        size: Expected board size, or None to accept any

    Returns:
        Parsed Target

    Raises:
        ParseTargetError: On missing fields, bad notation, non-numeric
            fields, NaN probabilities or a board of the wrong size
    """
    fields = line.strip().split(";")
    if not fields[0]:
        raise ParseTargetError("missing TPS")
    try:
        position = parse_tps(fields[0])
    except ParseTpsError as err:
        raise ParseTargetError(str(err)) from err
    if size is not None and position.size != size:
        raise ParseTargetError(f"expected a {size}x{size} board, got {position.size}x{position.size}")

    if len(fields) < 2:
        raise ParseTargetError("missing value")
    value = _parse_float(fields[1], "value")

    # One optional field is the policy; with two, the first is the uncertainty
    if len(fields) < 3:
        raise ParseTargetError("missing policy")
    if len(fields) == 3:
        ube = None
        policy_text = fields[2]
    else:
        ube = _parse_float(fields[2], "ube")
        policy_text = fields[3]

    policy = []
    for entry in policy_text.split(","):
        if not entry:
            continue
        move_text, sep, prob_text = entry.partition(":")
        if not sep:
            raise ParseTargetError("policy format is wrong")
        try:
            move = parse_move(move_text)
        except ParseMoveError as err:
            raise ParseTargetError(str(err)) from err
        probability = _parse_float(prob_text, "probability")
        if math.isnan(probability):
            raise ParseTargetError("policy is NaN")
        policy.append((move, probability))

    return Target(position, value, policy, ube)


def _parse_float(text: str, field: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ParseTargetError(f"invalid {field}: {text!r}") from None


def format_number(x: float) -> str:
    """Shortest float32 representation, e.g. 0.1 -> '0.1'."""
    return str(np.float32(x))


def format_target(target: Target) -> str:
    """Format a target as one line (without newline)."""
    fields = [format_tps(target.position), format_number(target.value)]
    if target.ube is not None:
        fields.append(format_number(target.ube))
    fields.append(",".join(f"{move}:{format_number(p)}" for move, p in target.policy))
    return ";".join(fields)
