#!/usr/bin/env python3
"""
check_compression.py
Compare original targets with decompressed targets line by line.

Prints the squared value error and policy KL divergence of each line, with
running means.

Usage:
    python check_compression.py targets.txt restored.txt
"""

import argparse
import sys

from training.logger import setup_logger
from training.stats import compare_lines


def main():
    parser = argparse.ArgumentParser(
        description="Report value loss and policy KL divergence between two target files"
    )
    parser.add_argument("original", help="Path to the original targets")
    parser.add_argument("converted", help="Path to the decompressed targets")
    args = parser.parse_args()

    logger = setup_logger("training")

    try:
        with open(args.original, 'r') as og, open(args.converted, 'r') as cv:
            for row in compare_lines(og, cv):
                print(
                    f"vl: {row.value_loss}, \tmean vl: {row.mean_value_loss}, "
                    f"\tkl: {row.kl_divergence}, \tmean_kl: {row.mean_kl_divergence}"
                )
    except OSError as e:
        logger.error(f"Could not open file: {e}")
        sys.exit(1)
    except ValueError as e:
        logger.error(f"Files do not match: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
