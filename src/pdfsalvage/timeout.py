"""Wall-clock guard around the whole tier ladder."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

from .errors import ExtractionTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_timeout(
    work: Coroutine[Any, Any, T],
    timeout_ms: int,
    *,
    file_name: str | None = None,
) -> T:
    """Race ``work`` against a timer; first to finish wins.

    The loser is cancelled. When the timer wins, in-flight work is
    abandoned (anything it already produced is discarded) and
    :class:`ExtractionTimeoutError` is raised.
    """
    work_task: asyncio.Task[T] = asyncio.ensure_future(work)
    timer_task = asyncio.ensure_future(asyncio.sleep(timeout_ms / 1000.0))
    try:
        done, _pending = await asyncio.wait({work_task, timer_task}, return_when=asyncio.FIRST_COMPLETED)
    except BaseException:
        work_task.cancel()
        timer_task.cancel()
        raise

    if work_task in done:
        timer_task.cancel()
        return work_task.result()

    work_task.cancel()
    # Let the cancellation land so the task is not reported as destroyed
    # while pending; threads already running decoder calls are not joined.
    await asyncio.gather(work_task, return_exceptions=True)
    logger.warning("extraction_timeout file=%s timeout_ms=%s", file_name, timeout_ms)
    raise ExtractionTimeoutError(timeout_ms, file_name=file_name)
