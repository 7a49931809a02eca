"""
bits.py
Bit cursor shared by the board state writer and reader.

Bits are packed least-significant-bit first within each byte:

        bits pushed:  b0 b1 b2 b3 b4 b5 b6 b7 b8 ...
        byte 0:       b7 b6 b5 b4 b3 b2 b1 b0   (b0 is bit 0)
        byte 1:       .. .. .. .. .. .. .. b8

Unused high bits of the last byte are always zero.
"""

from typing import Callable


class BitWriter:
    """Append-only bit buffer."""

    def __init__(self):
        self.data = bytearray()
        self.num_bits = 0

    def push(self, bit: bool) -> None:
        offset = self.num_bits % 8
        if offset == 0:
            self.data.append(0)
        if bit:
            self.data[-1] |= 1 << offset
        self.num_bits += 1

    def push_uint(self, value: int, num_bits: int) -> None:
        """Push the low `num_bits` bits of `value`, least significant first."""
        if value < 0 or value >> num_bits:
            raise ValueError(f"{value} does not fit in {num_bits} bits")
        for i in range(num_bits):
            self.push((value >> i) & 1)

    def to_bytes(self) -> bytes:
        return bytes(self.data)


class BitReader:
    """
    Bit cursor over a byte source.

    Bytes are pulled lazily from `next_byte` only when the current byte is
    exhausted, so a reader never consumes more bytes than the bits it returns.
    """

    def __init__(self, next_byte: Callable[[], int]):
        self._next_byte = next_byte
        self._byte = 0
        self._read = 8

    def next(self) -> bool:
        if self._read >= 8:
            self._byte = self._next_byte()
            self._read = 0
        bit = (self._byte >> self._read) & 1
        self._read += 1
        return bool(bit)

    def next_uint(self, num_bits: int) -> int:
        value = 0
        for i in range(num_bits):
            value |= int(self.next()) << i
        return value
