"""
test_dataset.py
Unit tests for the compressed target dataset and text target storage.
"""

import pytest
import torch
from torch.utils.data import DataLoader

from encoding.move import move_index
from encoding.planes import HIDDEN_DEPTH, NUM_PLANES, encode_board
from tak.game import Color, Position, Stack
from tak.moves import Piece, parse_move
from training.dataset import (
    TargetDataset,
    collate_targets,
    load_targets,
    save_targets,
    validate_target,
)
from training.pipeline import compress_lines
from training.targets import Target, format_target


def game_targets(positions, policy_for):
    return [Target(p, 0.5 if i % 2 else -0.5, policy_for(p, i)) for i, p in enumerate(positions)]


@pytest.fixture
def compressed_file(tmp_path, game, policy_for):
    """Compressed file holding one 5x5 game of 10 positions."""
    targets = game_targets(game(5, plies=9, seed=6), policy_for)
    path = tmp_path / "targets.bin"
    with open(path, 'wb') as f:
        compress_lines([format_target(t) for t in targets], f, 5)
    return str(path)


class TestTargetDataset:
    """Test TargetDataset class."""

    def test_dataset_length(self, compressed_file):
        assert len(TargetDataset(compressed_file, 5)) == 10

    def test_dataset_getitem(self, compressed_file):
        """Items hold planes, move indices, probabilities and value."""
        dataset = TargetDataset(compressed_file, 5)
        state, indices, policy, value = dataset[3]

        assert state.shape == (NUM_PLANES, 5, 5)
        assert state.dtype == torch.float32
        assert indices.dtype == torch.int64
        assert policy.dtype == torch.float32
        assert indices.shape == policy.shape
        assert policy.sum().item() == pytest.approx(1.0, abs=1e-5)
        assert value.item() == pytest.approx(0.5, abs=1e-4)

        target = dataset.targets[3]
        assert indices.tolist() == [move_index(m) for m, _ in target.policy]

    def test_dataset_batching(self, compressed_file):
        """Policies of different lengths are padded per batch."""
        dataset = TargetDataset(compressed_file, 5)
        loader = DataLoader(dataset, batch_size=4, collate_fn=collate_targets)
        states, indices, policies, values = next(iter(loader))

        lengths = [len(dataset[i][1]) for i in range(4)]
        assert states.shape == (4, NUM_PLANES, 5, 5)
        assert indices.shape == (4, max(lengths))
        assert policies.shape == (4, max(lengths))
        assert values.shape == (4, 1)

        for row, length in enumerate(lengths):
            assert (indices[row, length:] == -1).all()
            assert (policies[row, length:] == 0).all()

    def test_empty_file_raises_error(self, tmp_path):
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")
        with pytest.raises(ValueError):
            TargetDataset(str(path), 5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TargetDataset(str(tmp_path / "missing.bin"), 5)


class TestBoardPlanes:
    """Test tensor planes for network input."""

    def test_empty_board(self):
        planes = encode_board(Position(4))
        assert planes.shape == (1, NUM_PLANES, 4, 4)
        assert planes[0, :-1].sum().item() == 0
        assert (planes[0, -1] == 1).all()

    def test_black_to_move(self):
        planes = encode_board(Position(4, to_move=Color.BLACK))
        assert planes[0, -1].sum().item() == 0

    def test_stack_planes(self):
        position = Position(5)
        # White, Black, White from bottom to top at b1
        position.board[0][1] = Stack(Piece.FLAT, (Color.WHITE, Color.BLACK, Color.WHITE))
        position.board[2][3] = Stack(Piece.CAP, (Color.BLACK,))
        planes = encode_board(position)[0]

        assert planes[0, 0, 1] == 1
        assert planes[6 + HIDDEN_DEPTH, 0, 1] == 1  # black directly below the top
        assert planes[7, 0, 1] == 1  # white two below the top
        assert planes[5, 2, 3] == 1
        assert planes[:-1].sum().item() == 4

    def test_ignores_move_number(self):
        a = Position(4, move_number=1)
        b = Position(4, move_number=9)
        assert torch.equal(encode_board(a), encode_board(b))

    def test_deep_stack_truncated(self):
        position = Position(8)
        position.board[0][0] = Stack(Piece.WALL, (Color.BLACK,) * 20)
        planes = encode_board(position)[0]
        assert planes[4, 0, 0] == 1
        assert planes[6 + HIDDEN_DEPTH:6 + 2 * HIDDEN_DEPTH, 0, 0].sum().item() == HIDDEN_DEPTH


class TestTargetSaving:
    """Test target save/load functions."""

    def test_save_and_load(self, tmp_path, game, policy_for):
        positions = game(4, plies=3, seed=8)
        path = str(tmp_path / "targets.txt")
        save_targets(game_targets(positions, policy_for), path)

        loaded = load_targets(path, 4)
        assert [t.position for t in loaded] == positions
        assert all(t.actions_match_policy(t.position.legal_moves()) for t in loaded)

    def test_save_append(self, tmp_path, game, policy_for):
        targets = game_targets(game(4, plies=3, seed=8), policy_for)
        path = str(tmp_path / "targets.txt")
        save_targets(targets[:2], path)
        save_targets(targets[2:], path)
        assert len(load_targets(path, 4)) == 4

    def test_save_overwrite(self, tmp_path, game, policy_for):
        targets = game_targets(game(4, plies=3, seed=8), policy_for)
        path = str(tmp_path / "targets.txt")
        save_targets(targets, path)
        save_targets(targets[:1], path, append=False)
        assert len(load_targets(path, 4)) == 1


class TestTargetValidation:
    """Test target validation."""

    def make_target(self, value=0.0):
        position = Position(3)
        moves = position.legal_moves()
        return Target(position, value, [(m, 1.0 / len(moves)) for m in moves])

    def test_validate_correct_target(self):
        assert validate_target(self.make_target())

    def test_validate_value_range(self):
        assert not validate_target(self.make_target(value=1.5))

    def test_validate_policy_sum(self):
        target = self.make_target()
        target.policy[0] = (target.policy[0][0], 0.9)
        assert not validate_target(target)

    def test_validate_policy_moves(self):
        target = self.make_target()
        target.policy[0] = (parse_move("Sa1"), target.policy[0][1])
        assert not validate_target(target)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
