"""Text processing utilities for the visualization workflow."""

import re

_WORD = re.compile(r"\S+")


def count_words(text: str) -> int:
    """Count words in text (split on whitespace)."""
    return len(text.split())


def word_spans(text: str) -> list[tuple[int, int]]:
    """Character (start, end) offsets of every whitespace-delimited word."""
    return [m.span() for m in _WORD.finditer(text)]


def truncate(text: str, max_chars: int) -> str:
    """Truncate text to max_chars, stripping trailing whitespace."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip()


def first_words(text: str, n: int) -> str:
    """First n words of text joined by single spaces."""
    return " ".join(text.split()[:n])


def find_normalized(source: str, needle: str) -> tuple[int, int] | None:
    """Locate needle in source ignoring case and whitespace differences.

    Returns:
        (start, end) character offsets of the matching span in source, or
        None if needle does not occur
    """
    tokens = needle.split()
    if not tokens:
        return None
    pattern = r"\s+".join(re.escape(token) for token in tokens)
    match = re.search(pattern, source, re.IGNORECASE)
    if match is None:
        return None
    return match.span()
