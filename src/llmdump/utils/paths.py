"""Filesystem-safe names derived from oracle and operator text."""

import re

MAX_STEM_LENGTH = 100

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WHITESPACE = re.compile(r"\s+")


def safe_filename_stem(name: str, fallback: str = "untitled") -> str:
    """Make ``name`` usable as a single path component.

    Path separators, reserved and control characters become ``_``; leading and
    trailing dots/spaces are stripped so the stem can never be ``.`` or ``..``.
    """
    stem = _UNSAFE_CHARS.sub("_", name).strip(" .")
    stem = stem[:MAX_STEM_LENGTH].rstrip(" .")
    return stem or fallback


def category_filename(identifier: str, category: str) -> str:
    """File name for one category in multi-file exports."""
    category_part = _WHITESPACE.sub("_", category)
    return f"{safe_filename_stem(identifier)}_{safe_filename_stem(category_part)}.md"
