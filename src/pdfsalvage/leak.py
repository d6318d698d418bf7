"""Detect decoder output that is really raw PDF container syntax.

A broken decode path sometimes returns the bytes of the file itself
(object headers, dictionaries, stream keywords) instead of page content.
The same detector and thresholds are used for single pages and for whole
documents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

CONTAINER_MARKERS: tuple[str, ...] = (
    "%PDF-",
    "endobj",
    "xref",
    "startxref",
    "<<",
    ">>",
    "/Filter",
    "/Length",
    "stream",
    "endstream",
)

MIN_MARKERS = 5
MAX_UNREADABLE_RATIO = 0.5
MIN_READABLE_RESIDUE = 0.15

_READABLE_CHARS = frozenset(chr(c) for c in range(0x20, 0x7F)) | {"\n", "\r", "\t"}

# Order matters: object headers/references before bare integer pairs.
_STRUCTURE_TOKENS = re.compile(
    r"""
    %PDF-[\d.]*
    | %%EOF
    | \b\d+\s+\d+\s+(?:obj|R)\b
    | \b(?:endobj|obj|startxref|xref|trailer|endstream|stream)\b
    | <<
    | >>
    | /[^\s/<>\[\]()%]+
    | \b\d+\s+\d+\b
    | \s+
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class LeakVerdict:
    markers: int
    unreadable_ratio: float
    residue_ratio: float
    is_leak: bool


def count_markers(text: str) -> int:
    """Number of distinct container markers present in ``text``."""
    return sum(1 for marker in CONTAINER_MARKERS if marker in text)


def unreadable_ratio(text: str) -> float:
    """Share of characters outside printable ASCII plus whitespace."""
    if not text:
        return 0.0
    bad = sum(1 for ch in text if ch not in _READABLE_CHARS)
    return bad / len(text)


def readable_residue(text: str) -> float:
    """Share of ``text`` left once structure-like tokens are stripped."""
    if not text:
        return 1.0
    stripped = _STRUCTURE_TOKENS.sub("", text)
    return len(stripped) / len(text)


def analyse(text: str) -> LeakVerdict:
    markers = count_markers(text)
    if markers < MIN_MARKERS:
        return LeakVerdict(markers, 0.0, 1.0, False)
    ratio = unreadable_ratio(text)
    residue = readable_residue(text)
    leak = ratio > MAX_UNREADABLE_RATIO or residue < MIN_READABLE_RESIDUE
    return LeakVerdict(markers, ratio, residue, leak)


def is_structure_leak(text: str) -> bool:
    """Return True when ``text`` looks like leaked container syntax.

    Fewer than five distinct markers is always clean. Otherwise the text
    is a leak if most of it is unreadable or if almost nothing survives
    once structural tokens are removed.
    """
    return analyse(text).is_leak
