"""
config.py
Configuration for compressing and loading training targets.
"""

# Board sizes the codec supports (row/column must fit in 3 bits)
SUPPORTED_SIZES = (3, 4, 5, 6, 7, 8)

# Log compression progress every N input lines
PROGRESS_INTERVAL = 10_000

# Logging
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# check_compression clamps probabilities before taking logs
KL_EPSILON = 1e-16


def validate_board_size(size) -> int:
    """
    Validate a board size before any codec work.

    Args:
        size: Board size, int or numeric string

    Returns:
        Size as int

    Raises:
        ValueError: If size is not a number or not in SUPPORTED_SIZES
    """
    try:
        size = int(size)
    except (TypeError, ValueError):
        raise ValueError(f"The specified size is not a number: {size!r}") from None
    if size not in SUPPORTED_SIZES:
        raise ValueError(f"Unsupported board size {size}")
    return size
