"""Utility functions."""

from llmdump.utils.paths import category_filename, safe_filename_stem

__all__ = [
    "category_filename",
    "safe_filename_stem",
]
