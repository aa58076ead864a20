"""
Helper utilities for content display fields.

This module contains read-time estimation, slug generation and the
human-readable sermon duration and size formats.
"""

import math
import re

WORDS_PER_MINUTE = 200


def calculate_read_time(content: str) -> int:
    """
    Estimate reading time in minutes.

    Args:
        content: Blog body text

    Returns:
        ceil(word_count / 200), where words are whitespace separated
    """
    word_count = len(content.split())
    return math.ceil(word_count / WORDS_PER_MINUTE)


def slugify(title: str) -> str:
    """
    Build a URL slug from a title.

    Example:
        slugify("Walking in Faith!") -> "walking-in-faith"
    """
    slug = re.sub(r"[^a-z0-9 -]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def format_duration(seconds: int | None) -> str:
    """Format a duration as m:ss."""
    if not seconds:
        return "0:00"
    minutes, remainder = divmod(seconds, 60)
    return f"{minutes}:{remainder:02d}"


def format_file_size(size_bytes: int | None) -> str:
    if not size_bytes:
        return "0 MB"
    return f"{size_bytes / (1024 * 1024):.2f} MB"
