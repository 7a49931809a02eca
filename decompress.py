#!/usr/bin/env python3
"""
decompress.py
CLI entrypoint for decompressing Tak training targets.

Usage:
    python decompress.py targets.bin 6                  # Print to stdout
    python decompress.py targets.bin 6 -o restored.txt
"""

import argparse
import logging
import sys

from encoding.move import CorruptStreamError
from encoding.stream import TruncatedStreamError
from training.config import validate_board_size
from training.logger import setup_logger
from training.pipeline import decompress_stream
from training.targets import format_target


def main():
    parser = argparse.ArgumentParser(
        description="Decompress a binary entry stream into Tak training targets",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("input", help="Path to the compressed stream")
    parser.add_argument("size", help="Board size used when compressing (3-8)")
    parser.add_argument("--output", "-o", type=str, default=None, help="Write targets here instead of stdout")
    parser.add_argument("--limit", type=int, default=None, help="Stop after N targets")
    parser.add_argument("--log-file", type=str, default=None, help="Also log to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logger = setup_logger(
        "training",
        log_file=args.log_file,
        level=logging.DEBUG if args.verbose else logging.INFO
    )

    try:
        size = validate_board_size(args.size)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        with open(args.input, 'rb') as src:
            out = open(args.output, 'w') if args.output else sys.stdout
            try:
                for target in decompress_stream(src, size, limit=args.limit):
                    out.write(format_target(target) + '\n')
            finally:
                if out is not sys.stdout:
                    out.close()
    except OSError as e:
        logger.error(f"Could not open file: {e}")
        sys.exit(1)
    except (TruncatedStreamError, CorruptStreamError) as e:
        logger.error(f"Decompression failed: {e}")
        sys.exit(1)

    logger.info("Successfully decompressed targets.")


if __name__ == "__main__":
    main()
