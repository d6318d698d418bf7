"""Structural interface every document decoder backend satisfies."""

from __future__ import annotations

import io
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from ..models import DecodeOptions, DocumentMetadata, TextRun

SAME_LINE_TOLERANCE = 0.5


@runtime_checkable
class PageHandle(Protocol):
    def get_text_runs(self) -> list[TextRun]:
        """Return the positioned runs of this page (order not guaranteed)."""
        ...


@runtime_checkable
class DocumentHandle(Protocol):
    def page_count(self) -> int: ...

    def get_page(self, page_number: int) -> PageHandle:
        """Return the 1-indexed page ``page_number``."""
        ...

    def metadata(self) -> DocumentMetadata: ...

    def close(self) -> None: ...


@runtime_checkable
class DocumentDecoder(Protocol):
    name: str

    def initialize(self) -> None:
        """One-time backend configuration; must be idempotent."""
        ...

    def open(self, buffer: io.BytesIO, options: DecodeOptions) -> DocumentHandle:
        """Open a document from a single-use buffer.

        Raises:
            DecodeError: the buffer is not a decodable document.
        """
        ...


def combine_adjacent_runs(runs: Sequence[TextRun]) -> list[TextRun]:
    """Merge consecutive runs that share a baseline into one run.

    The merged run keeps the position of its first fragment. Fragments are
    concatenated as-is since decoders already emit inter-word spaces.
    """
    combined: list[TextRun] = []
    for run in runs:
        if combined:
            prev = combined[-1]
            if abs(prev.y - run.y) <= SAME_LINE_TOLERANCE and run.x >= prev.x:
                combined[-1] = TextRun(prev.content + run.content, prev.position)
                continue
        combined.append(run)
    return combined


def split_keywords(raw: object) -> list[str] | None:
    if not raw:
        return None
    words = [k.strip() for k in str(raw).split(",")]
    return [k for k in words if k] or None


def clean_info_value(raw: object) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    return value or None
