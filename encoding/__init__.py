"""
encoding package
Compression codec for Tak training targets: quantizers, action codes,
board state bits, relative-state prediction and the entry stream.
"""

from encoding.move import TERMINAL_ACTION, encode_move, decode_move
from encoding.state import write_state, read_state
from encoding.stream import StreamDecoder, StreamEncoder

__all__ = [
    'TERMINAL_ACTION', 'encode_move', 'decode_move',
    'write_state', 'read_state',
    'StreamDecoder', 'StreamEncoder',
]
