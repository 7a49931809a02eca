"""
training package
Target notation, compression pipeline and dataset loading for Tak training data.
"""

from training.targets import Target, parse_target, format_target
from training.pipeline import compress_lines, decompress_stream
from training.dataset import TargetDataset, save_targets, load_targets

__all__ = [
    'Target', 'parse_target', 'format_target',
    'compress_lines', 'decompress_stream',
    'TargetDataset', 'save_targets', 'load_targets',
]
