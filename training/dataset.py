"""
dataset.py
PyTorch dataset over compressed training targets.

The compressed stream can only be decoded front to back, so the dataset
decodes the whole file once at construction and serves items from memory.

Item format:
    state:        [NUM_PLANES, N, N] float32 board planes
    move_indices: [M] int64 action indices (encoding.move.move_index)
    policy:       [M] float32 probabilities, sum=1.0
    value:        scalar float32 in [-1, 1]
"""

from typing import List, Tuple

import torch
from torch.utils.data import Dataset

from encoding.move import move_indices
from encoding.planes import encode_board
from training.pipeline import decompress_stream
from training.targets import Target, format_target, parse_target


class TargetDataset(Dataset):
    """
    PyTorch Dataset for compressed Tak targets.

    Loads targets from a compressed file and provides indexed access.
    """

    def __init__(self, compressed_file: str, size: int):
        """
        Decode all targets from a compressed file.

        Args:
            compressed_file: Path to a file written by compress.py
            size: Board size used when compressing

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file holds no targets
        """
        with open(compressed_file, 'rb') as f:
            self.targets: List[Target] = list(decompress_stream(f, size))

        if len(self.targets) == 0:
            raise ValueError(f"No targets loaded from {compressed_file}")

    def __len__(self) -> int:
        return len(self.targets)

    def __getitem__(self, idx: int) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]:
        target = self.targets[idx]

        state = encode_board(target.position).squeeze(0)
        indices = torch.tensor(move_indices(move for move, _ in target.policy), dtype=torch.int64)
        policy = torch.tensor([p for _, p in target.policy], dtype=torch.float32)
        value = torch.tensor(target.value, dtype=torch.float32)

        return state, indices, policy, value


def collate_targets(
    batch: List[Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]]
) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor, torch.Tensor]:
    """
    Stack dataset items, padding policies to the longest in the batch.

    Padding uses move index -1 and probability 0.

    Returns:
        states: [B, NUM_PLANES, N, N]
        move_indices: [B, M_max]
        policies: [B, M_max]
        values: [B, 1]
    """
    states, indices, policies, values = zip(*batch)
    longest = max(len(p) for p in policies)

    padded_indices = torch.full((len(batch), longest), -1, dtype=torch.int64)
    padded_policies = torch.zeros((len(batch), longest), dtype=torch.float32)
    for i, (idx, pol) in enumerate(zip(indices, policies)):
        padded_indices[i, :len(idx)] = idx
        padded_policies[i, :len(pol)] = pol

    return (
        torch.stack(states),
        padded_indices,
        padded_policies,
        torch.stack(values).unsqueeze(1),
    )


def save_targets(targets: List[Target], file_path: str, append: bool = True) -> None:
    """
    Save targets as text lines.

    Args:
        targets: Targets to write
        file_path: Output file path
        append: If True, append to existing file; if False, overwrite
    """
    mode = 'a' if append else 'w'

    with open(file_path, mode) as f:
        for target in targets:
            f.write(format_target(target) + '\n')


def load_targets(file_path: str, size: int) -> List[Target]:
    """Load text targets, skipping blank lines."""
    with open(file_path, 'r') as f:
        return [parse_target(line, size) for line in f if line.strip()]


def validate_target(target: Target) -> bool:
    """
    Check that a target is ready for compression.

    Checks:
        - Value is in [-1, 1]
        - Policy moves equal the generated legal moves, in order
        - Probabilities are in [0, 1] and sum to ~1.0
    """
    if not -1.0 <= target.value <= 1.0:
        return False

    if not target.actions_match_policy(target.position.legal_moves()):
        return False

    probabilities = [p for _, p in target.policy]
    if any(not 0.0 <= p <= 1.0 for p in probabilities):
        return False
    policy_sum = sum(probabilities)
    if not (0.99 <= policy_sum <= 1.01):  # Allow small floating point error
        return False

    return True
