"""
stream.py
Streaming encoder/decoder for compressed training targets.

Entry layout (multi-byte integers little-endian):
    Entry  ::= (Action | 0x00 StateBits) Value Policy
    Action ::= kind byte, square byte        (encoding.move)
    Value  ::= u16                           (encoding.quantize)
    Policy ::= (Action u16)* 0x00

Each entry is decoded relative to the position left by the previous one, so
a stream must be decoded in order from its first byte. Both sides start from
an empty board with White to move.
"""

import io
import struct
from typing import BinaryIO, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from encoding.delta import find_relative_move
from encoding.move import CorruptStreamError, encode_action, read_action
from encoding.quantize import (
    complete_policy,
    decode_probability,
    decode_value,
    encode_probability,
    encode_value,
)
from encoding.state import read_state, write_state
from tak.game import IllegalMoveError, Position
from tak.moves import Move

U16 = struct.Struct("<H")

Policy = Sequence[Tuple[Move, float]]


class TruncatedStreamError(EOFError):
    """Raised when the stream ends in the middle of an entry."""


class PolicyMismatchError(ValueError):
    """Raised when a record's policy moves differ from the generated legal moves."""


class DecodedEntry(NamedTuple):
    position: Position
    value: float
    policy: List[Tuple[Move, float]]


class ByteReader:
    """Buffered byte cursor over a binary stream."""

    def __init__(self, stream: BinaryIO, buffer_size: int = 1 << 16):
        self._stream = stream
        self._buffer_size = buffer_size
        self._buffer = b""
        self._pos = 0
        self.offset = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> "ByteReader":
        return cls(io.BytesIO(data))

    def _fill(self) -> bool:
        self._buffer = self._stream.read(self._buffer_size)
        self._pos = 0
        return len(self._buffer) > 0

    def at_end(self) -> bool:
        return self._pos >= len(self._buffer) and not self._fill()

    def read_byte(self) -> int:
        if self._pos >= len(self._buffer) and not self._fill():
            raise TruncatedStreamError(f"stream ended mid-entry at byte {self.offset}")
        byte = self._buffer[self._pos]
        self._pos += 1
        self.offset += 1
        return byte

    def read_u16(self) -> int:
        low = self.read_byte()
        return low | (self.read_byte() << 8)


def encode_policy(policy: Policy) -> bytes:
    """Write policy entries above the pruning threshold, then the terminal action."""
    out = bytearray()
    for move, probability in policy:
        compressed = encode_probability(probability)
        if compressed is None:
            continue
        out += encode_action(move)
        out += U16.pack(compressed)
    out += encode_action(None)
    return bytes(out)


class StreamEncoder:
    """
    Encodes targets one at a time, carrying the previous position.

    The carried state only advances when an entry is produced, so the
    encoder and a decoder of its output always agree on the reference
    position for relative entries.
    """

    def __init__(self, size: int):
        self.size = size
        self.previous_position = Position(size)
        self.previous_legal_moves: List[Move] = []

    def encode(self, position: Position, value: float, policy: Policy) -> bytes:
        """
        Encode one target as an entry.

        Args:
            position: Position of the target
            value: Outcome value in [-1, 1]
            policy: (move, probability) pairs in legal-move generation order

        Returns:
            Entry bytes

        Raises:
            PolicyMismatchError: If the policy moves are not exactly the
                legal moves of `position`, in order
            ValueError: If the position has the wrong size or a number is
                out of range
        """
        if position.size != self.size:
            raise ValueError(f"expected a {self.size}x{self.size} position, got {position.size}")

        action = find_relative_move(self.previous_position, self.previous_legal_moves, position)

        legal_moves = position.legal_moves()
        if len(policy) != len(legal_moves) or any(
            move != legal for (move, _), legal in zip(policy, legal_moves)
        ):
            raise PolicyMismatchError(
                f"policy has {len(policy)} moves, generated {len(legal_moves)} legal moves"
            )

        out = bytearray(encode_action(action))
        if action is None:
            out += write_state(position)
        out += U16.pack(encode_value(value))
        out += encode_policy(policy)

        self.previous_position = position.copy()
        self.previous_legal_moves = legal_moves
        return bytes(out)


class StreamDecoder:
    """Decodes entries in order, carrying the current position."""

    def __init__(self, size: int):
        self.size = size
        self.position = Position(size)

    def decode_entry(self, reader: ByteReader) -> DecodedEntry:
        """
        Decode the next entry.

        Raises:
            TruncatedStreamError: If the stream ends inside the entry
            CorruptStreamError: If the entry cannot be applied
        """
        action = read_action(reader.read_byte)
        if action is None:
            self.position = read_state(reader.read_byte, self.size)
        else:
            try:
                self.position.play(action)
            except IllegalMoveError as err:
                raise CorruptStreamError(f"relative move at byte {reader.offset}: {err}") from err

        value = decode_value(reader.read_u16())

        decoded = []
        while True:
            move = read_action(reader.read_byte)
            if move is None:
                break
            decoded.append((move, decode_probability(reader.read_u16())))

        policy = complete_policy(decoded, self.position.legal_moves())
        return DecodedEntry(self.position.copy(), value, policy)

    def decode(self, reader: ByteReader) -> Iterator[DecodedEntry]:
        while not reader.at_end():
            yield self.decode_entry(reader)


def decode_bytes(data: bytes, size: int) -> List[DecodedEntry]:
    return list(StreamDecoder(size).decode(ByteReader.from_bytes(data)))


def encode_targets(targets, size: int, encoder: Optional[StreamEncoder] = None) -> bytes:
    """
    Encode (position, value, policy) triples into one stream.

    Records with a policy mismatch propagate PolicyMismatchError; callers
    that skip bad records use StreamEncoder directly.
    """
    encoder = encoder or StreamEncoder(size)
    return b"".join(encoder.encode(position, value, policy) for position, value, policy in targets)
