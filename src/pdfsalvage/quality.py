"""Cheap content sanity check for extracted text."""

from __future__ import annotations

import re

MIN_TEXT_LENGTH = 10
MIN_WORD_TOKENS = 5  # strictly more than this many are required

_WORD_TOKEN = re.compile(r"[^\W\d_]{3,}")


def word_tokens(text: str) -> list[str]:
    """Runs of three or more consecutive letters."""
    return _WORD_TOKEN.findall(text or "")


def is_meaningful(text: str) -> bool:
    """Return True unless ``text`` is near-empty or purely symbolic/numeric.

    Deliberately permissive: grammar and language are not checked.
    """
    if not text or len(text.strip()) < MIN_TEXT_LENGTH:
        return False
    return len(word_tokens(text)) > MIN_WORD_TOKENS


def count_words(text: str) -> int:
    return len([w for w in (text or "").split() if w])
