#!/usr/bin/env python3
"""
compress.py
CLI entrypoint for compressing Tak training targets.

Usage:
    python compress.py targets.txt targets.bin 6
    python compress.py targets.txt targets.bin 6 --log-file logs/compress.log
"""

import argparse
import logging
import sys

from training.config import PROGRESS_INTERVAL, validate_board_size
from training.logger import setup_logger
from training.pipeline import compress_lines


def main():
    parser = argparse.ArgumentParser(
        description="Compress Tak training targets into a binary entry stream",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("input", help="Path to target lines")
    parser.add_argument("output", help="Path of the compressed output (overwritten)")
    parser.add_argument("size", help="Board size (3-8)")
    parser.add_argument(
        "--progress-interval",
        type=int,
        default=PROGRESS_INTERVAL,
        help="Log progress every N lines (0 disables)"
    )
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
        with open(args.input, 'r') as src, open(args.output, 'wb') as dst:
            compress_lines(src, dst, size, progress_interval=args.progress_interval)
    except OSError as e:
        logger.error(f"Could not open file: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Compression failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Compression interrupted by user")
        sys.exit(1)

    print("Successfully compressed targets.")


if __name__ == "__main__":
    main()
