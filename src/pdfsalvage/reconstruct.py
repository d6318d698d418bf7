"""Rebuild reading-order text from positioned runs.

Decoders hand back the runs of a page in whatever order the content
stream drew them. ``reconstruct_lines`` imposes top-to-bottom,
left-to-right order and breaks lines on vertical jumps.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from .models import TextRun

logger = logging.getLogger(__name__)

LINE_BREAK_THRESHOLD = 5.0


def _sort_key(run: TextRun) -> tuple[float, float]:
    x, y = run.position
    return (-float(y), float(x))


def reconstruct_lines(runs: Sequence[TextRun]) -> str:
    """Return the page text in reading order, one visual line per line.

    Falls back to :func:`concat_runs` when positions cannot be ordered
    (missing or non-numeric coordinates). Never raises.
    """
    try:
        ordered = sorted(runs, key=_sort_key)
        lines: list[str] = []
        current: list[str] = []
        last_y: float | None = None
        for run in ordered:
            content = run.content.strip()
            if not content:
                continue
            y = float(run.position[1])
            if last_y is not None and abs(y - last_y) > LINE_BREAK_THRESHOLD:
                lines.append(" ".join(current))
                current = []
            current.append(content)
            last_y = y
        if current:
            lines.append(" ".join(current))
        return "\n".join(lines).strip()
    except Exception as e:  # noqa: BLE001
        logger.debug("reconstruct_sort_failed runs=%s error=%r", len(runs), e)
        return concat_runs(runs)


def concat_runs(runs: Iterable[TextRun]) -> str:
    """Join non-empty run contents in encounter order with single spaces."""
    parts: list[str] = []
    for run in runs:
        content = getattr(run, "content", None)
        if not isinstance(content, str):
            continue
        content = content.strip()
        if content:
            parts.append(content)
    return " ".join(parts)


def raw_page_text(runs: Iterable[TextRun]) -> str:
    # unprocessed, for leak detection
    return " ".join(run.content for run in runs if isinstance(run.content, str))
