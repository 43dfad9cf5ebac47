"""Whitespace word helpers shared by the timer and the sectioner."""

from __future__ import annotations

from typing import List


def split_words(text: str) -> List[str]:
    """Split text on runs of whitespace; blank text has no words."""
    return (text or "").split()


def count_words(text: str) -> int:
    return len(split_words(text))


def join_words(words: List[str]) -> str:
    """Rejoin words with single spaces."""
    return " ".join(words)
