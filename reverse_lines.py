#!/usr/bin/env python3
"""
reverse_lines.py
Write the lines of a file in reverse order.

Self-play exports list each game from its last position back to its first;
reversing restores move order so consecutive targets compress as relative
entries.

Usage:
    python reverse_lines.py targets.txt reversed.txt
"""

import argparse
import sys
from typing import Iterable, List

from training.logger import setup_logger


def reverse_lines(lines: Iterable[str]) -> List[str]:
    """Return lines in reverse order, each without its trailing newline."""
    return [line.rstrip('\r\n') for line in lines][::-1]


def main():
    parser = argparse.ArgumentParser(description="Reverse the lines of a file")
    parser.add_argument("input", help="Path to the input file")
    parser.add_argument("output", help="Path of the output file (overwritten)")
    args = parser.parse_args()

    logger = setup_logger("training")

    try:
        with open(args.input, 'r') as src:
            lines = reverse_lines(src)
        with open(args.output, 'w') as dst:
            for line in lines:
                dst.write(line + '\n')
    except OSError as e:
        logger.error(f"Could not open file: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
