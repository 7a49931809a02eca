"""
pipeline.py
End-to-end compression: target lines → entry stream → target lines.

Records that fail to parse or whose policy does not match the generated legal
moves are logged and skipped. Everything else is fatal.
"""

import logging
from typing import BinaryIO, Iterable, Iterator, Optional

from encoding.stream import ByteReader, PolicyMismatchError, StreamDecoder, StreamEncoder
from training.config import PROGRESS_INTERVAL, validate_board_size
from training.targets import ParseTargetError, Target, parse_target

logger = logging.getLogger(__name__)


class CompressionStats:
    """Running totals for one compression pass."""

    def __init__(self):
        self.lines = 0
        self.written_records = 0
        self.skipped_records = 0
        self.relative_records = 0
        self.original_bytes = 0
        self.written_bytes = 0

    def percent(self) -> float:
        if self.original_bytes == 0:
            return 0.0
        return 100.0 * self.written_bytes / self.original_bytes

    def __repr__(self) -> str:
        return (
            f"CompressionStats(written={self.written_records}, skipped={self.skipped_records}, "
            f"relative={self.relative_records}, {self.original_bytes} -> {self.written_bytes})"
        )


def compress_lines(
    lines: Iterable[str],
    output: BinaryIO,
    size: int,
    progress_interval: int = PROGRESS_INTERVAL
) -> CompressionStats:
    """
    Compress target lines into an entry stream.

    Args:
        lines: Target lines (trailing newlines allowed)
        output: Binary stream receiving the entries
        size: Board size of every target
        progress_interval: Log progress every N lines (0 disables)

    Returns:
        CompressionStats for the pass

    Raises:
        ValueError: If size is unsupported or a value/probability is out of range
    """
    size = validate_board_size(size)
    encoder = StreamEncoder(size)
    stats = CompressionStats()

    for i, line in enumerate(lines):
        stats.lines += 1
        line = line.rstrip("\r\n")
        try:
            target = parse_target(line, size)
        except ParseTargetError as err:
            logger.warning(f"Could not parse target [{i}]: {err}")
            stats.skipped_records += 1
            continue

        try:
            entry = encoder.encode(target.position, target.value, target.policy)
        except PolicyMismatchError as err:
            logger.warning(f"Generated actions differ from policy actions [{i}]: {err}")
            stats.skipped_records += 1
            continue

        output.write(entry)
        stats.written_records += 1
        stats.original_bytes += len(line.encode())
        stats.written_bytes += len(entry)
        if entry[0] != 0x00:
            stats.relative_records += 1

        if progress_interval and i % progress_interval == 0:
            logger.info(
                f"[{i}] {stats.original_bytes} -> {stats.written_bytes} ({stats.percent():.1f}%)"
            )

    logger.info(
        f"Compressed {stats.written_records} targets ({stats.relative_records} relative), "
        f"skipped {stats.skipped_records}: {stats.original_bytes} -> {stats.written_bytes} "
        f"bytes ({stats.percent():.1f}%)"
    )
    return stats


def decompress_stream(
    stream: BinaryIO,
    size: int,
    limit: Optional[int] = None
) -> Iterator[Target]:
    """
    Decompress an entry stream into targets.

    Args:
        stream: Binary stream of entries
        size: Board size used when compressing
        limit: Stop after this many targets (None = all)

    Yields:
        Targets with completed, renormalized policies and no uncertainty

    Raises:
        TruncatedStreamError: If the stream ends mid-entry
        CorruptStreamError: If an entry cannot be decoded
    """
    size = validate_board_size(size)
    decoder = StreamDecoder(size)
    reader = ByteReader(stream)

    count = 0
    for entry in decoder.decode(reader):
        yield Target(entry.position, entry.value, entry.policy)
        count += 1
        if limit is not None and count >= limit:
            break
    logger.debug(f"Decompressed {count} targets from {reader.offset} bytes")
