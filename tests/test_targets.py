"""
test_targets.py
Tests for target notation and the compression pipeline.
"""

import io
import logging
import math

import pytest

from encoding.stream import TruncatedStreamError
from tak.moves import parse_move
from tak.tps import parse_tps
from training.pipeline import compress_lines, decompress_stream
from training.targets import ParseTargetError, Target, format_number, format_target, parse_target

EXAMPLE_TPS = (
    "2,2,1,1,2,1/2,1,221C,2C,1S,2/1,221,x,2,2,1/1,1,12S,2,2,1/"
    "x2,22121S,2S,12,2/2,1,1,1,1112S,1 2 31"
)

# Probabilities of the strongest moves in a recorded search; every other
# legal move gets a negligible share.
STRONG_MOVES = {
    "2c3<": 0.73675114,
    "4e1<112": 0.24831665,
    "Sb2": 0.0075890995,
    "4e1<121": 0.0047274427,
    "4e1<211": 0.0024097634,
}


def example_line(ube=True):
    moves = parse_tps(EXAMPLE_TPS).legal_moves()
    policy = ",".join(f"{m}:{STRONG_MOVES.get(str(m), 1e-12)}" for m in moves)
    fields = [EXAMPLE_TPS, "0.5918575"]
    if ube:
        fields.append("3.6265328")
    fields.append(policy)
    return ";".join(fields)


def game_lines(positions, policy_for):
    return [
        format_target(Target(p, (i % 5) / 4.0 - 0.5, policy_for(p, i)))
        for i, p in enumerate(positions)
    ]


class TestParseTarget:
    """Test target line parsing."""

    def test_with_ube(self):
        target = parse_target(example_line())
        assert target.position == parse_tps(EXAMPLE_TPS)
        assert target.value == pytest.approx(0.5918575)
        assert target.ube == pytest.approx(3.6265328)
        assert len(target.policy) == 87

    def test_without_ube(self):
        target = parse_target(example_line(ube=False))
        assert target.ube is None
        assert target.policy[0][0] == parse_move("a1+")

    def test_actions_match_policy(self):
        target = parse_target(example_line())
        legal_moves = target.position.legal_moves()
        assert target.actions_match_policy(legal_moves)
        assert not target.actions_match_policy(legal_moves[1:])
        assert not target.actions_match_policy(legal_moves[::-1])

    def test_trailing_comma_and_newline(self):
        target = parse_target("x3/x3/x3 1 1;0;a1:0.5,a2:0.5,\n")
        assert [str(m) for m, _ in target.policy] == ["a1", "a2"]

    def test_wrong_size(self):
        with pytest.raises(ParseTargetError):
            parse_target(example_line(), size=5)

    @pytest.mark.parametrize("line", [
        "",
        "x3/x3/x3 1 1",
        "x3/x3/x3 1 1;0.5",
        "x3/x3 1 1;0.5;a1:1",
        "x3/x3/x3 1 1;high;a1:1",
        "x3/x3/x3 1 1;0.5;a1=1",
        "x3/x3/x3 1 1;0.5;q9:1",
        "x3/x3/x3 1 1;0.5;a1:nan",
        "x3/x3/x3 1 1;0.5;bad;a1:1",
    ])
    def test_invalid(self, line):
        with pytest.raises(ParseTargetError):
            parse_target(line)

    def test_format_roundtrip(self):
        line = "x3/x3/1,2,x 1 2;0.25;0.5;a2:0.75,Sa2:0.25"
        assert format_target(parse_target(line)) == line

    def test_format_number(self):
        assert format_number(0.1) == "0.1"
        assert format_number(1.0) == "1.0"


class TestPipeline:
    """Test compressing and decompressing target lines."""

    def test_game_lines_are_relative(self, game, policy_for):
        positions = game(5, plies=30, seed=9)
        lines = game_lines(positions, policy_for)
        output = io.BytesIO()
        stats = compress_lines(lines, output, 5, progress_interval=0)

        assert stats.written_records == len(lines)
        assert stats.skipped_records == 0
        assert stats.relative_records == len(lines) - 1
        assert stats.written_bytes == len(output.getvalue())
        assert stats.percent() < 100.0

        targets = list(decompress_stream(io.BytesIO(output.getvalue()), 5))
        assert [t.position for t in targets] == positions
        for original, decoded in zip(lines, targets):
            expected = parse_target(original)
            assert decoded.value == pytest.approx(expected.value, abs=1.0 / 65535 + 1e-7)
            assert decoded.actions_match_policy(decoded.position.legal_moves())
            assert math.isclose(sum(p for _, p in decoded.policy), 1.0, abs_tol=1e-9)
            assert decoded.ube is None

    def test_example_target(self):
        output = io.BytesIO()
        compress_lines([example_line()], output, 6)
        [target] = decompress_stream(io.BytesIO(output.getvalue()), 6)
        probabilities = dict((str(m), p) for m, p in target.policy)
        assert probabilities["2c3<"] == pytest.approx(0.73675114, rel=1e-3)
        assert probabilities["a2"] < 2e-5

    def test_bad_records_skipped(self, game, policy_for, caplog):
        positions = game(4, plies=6, seed=1)
        lines = game_lines(positions, policy_for)
        lines.insert(2, "not a target")
        lines.insert(4, format_target(Target(positions[2], 0.0, policy_for(positions[2], 0)[1:])))

        output = io.BytesIO()
        with caplog.at_level(logging.WARNING):
            stats = compress_lines(lines, output, 4, progress_interval=0)

        assert stats.skipped_records == 2
        assert stats.written_records == len(positions)
        assert "Could not parse target [2]" in caplog.text
        assert "Generated actions differ" in caplog.text

        decoded = list(decompress_stream(io.BytesIO(output.getvalue()), 4))
        assert [t.position for t in decoded] == positions

    def test_original_size_counts_utf8_bytes(self):
        line = "x3/x3/x3 1 1;0;a1:1,a2:0,a3:0,b1:0,b2:0,b3:0,c1:0,c2:0,c3:0"
        # trailing ideographic space is three bytes in UTF-8 and is stripped on parse
        stats = compress_lines([line + "\u3000\n"], io.BytesIO(), 3, progress_interval=0)
        assert stats.written_records == 1
        assert stats.original_bytes == len(line) + 3

    def test_progress_logged(self, game, policy_for, caplog):
        lines = game_lines(game(3, plies=4, seed=0), policy_for)
        with caplog.at_level(logging.INFO):
            compress_lines(lines, io.BytesIO(), 3, progress_interval=2)
        assert "[0] " in caplog.text
        assert "[2] " in caplog.text

    def test_unsupported_size(self):
        with pytest.raises(ValueError):
            compress_lines([], io.BytesIO(), 9)

    def test_decompress_limit(self, game, policy_for):
        lines = game_lines(game(3, plies=5, seed=2), policy_for)
        output = io.BytesIO()
        compress_lines(lines, output, 3)
        targets = list(decompress_stream(io.BytesIO(output.getvalue()), 3, limit=2))
        assert len(targets) == 2

    def test_truncated_file(self, game, policy_for):
        lines = game_lines(game(3, plies=3, seed=2), policy_for)
        output = io.BytesIO()
        compress_lines(lines, output, 3)
        with pytest.raises(TruncatedStreamError):
            list(decompress_stream(io.BytesIO(output.getvalue()[:-1]), 3))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
