"""
Text processing utilities for field cleanup and filesystem-safe naming.
"""

import re
from typing import Iterable, List

# Characters allowed in slugs (stored names, namespace directories)
SLUG_ALPHABET = "A-Za-z0-9_-"
_NON_SLUG = re.compile(f"[^{SLUG_ALPHABET}]+")


def slugify(text: str, fallback: str = "cv", max_length: int = 80) -> str:
    """
    Reduce text to the slug alphabet [A-Za-z0-9_-].

    Runs of other characters become a single underscore; leading and trailing
    underscores are stripped.

    Args:
        text: Arbitrary text (display name, caller id)
        fallback: Returned when nothing survives
        max_length: Maximum slug length

    Returns:
        Non-empty slug

    Example:
        >>> slugify("Jane O'Neil, PhD")
        'Jane_O_Neil_PhD'
        >>> slugify("../../")
        'cv'
    """
    slug = _NON_SLUG.sub("_", text or "").strip("_")[:max_length].strip("_")
    return slug or fallback


def unique_in_order(items: Iterable[str]) -> List[str]:
    """
    Drop repeated items, keeping first occurrences in their original order.

    Example:
        >>> unique_in_order(["Go", "Rust", "Go"])
        ['Go', 'Rust']
    """
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def split_comma_list(text: str) -> List[str]:
    """
    Split comma-separated text into trimmed, non-empty segments.

    Example:
        >>> split_comma_list("Go, Rust, , Python")
        ['Go', 'Rust', 'Python']
    """
    return [segment.strip() for segment in (text or "").split(",") if segment.strip()]


def split_lines(text: str) -> List[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def underscore_whitespace(text: str) -> str:
    """
    Replace each run of whitespace with a single underscore.

    Example:
        >>> underscore_whitespace("Jane  Doe")
        'Jane_Doe'
    """
    return re.sub(r"\s+", "_", text)
