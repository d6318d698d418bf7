import asyncio
import time

import pytest

from pdfsalvage.errors import ExtractionTimeoutError
from pdfsalvage.timeout import run_with_timeout

pytestmark = pytest.mark.anyio


async def test_fast_work_wins():
    async def work() -> str:
        await asyncio.sleep(0.01)
        return "done"

    assert await run_with_timeout(work(), 1000) == "done"


async def test_work_errors_propagate_unchanged():
    async def work() -> None:
        raise KeyError("boom")

    with pytest.raises(KeyError):
        await run_with_timeout(work(), 1000)


async def test_timer_wins_and_cancels_work():
    state = {"cancelled": False, "finished": False}

    async def work() -> str:
        try:
            await asyncio.sleep(5)
            state["finished"] = True
            return "late"
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    t0 = time.perf_counter()
    with pytest.raises(ExtractionTimeoutError) as exc:
        await run_with_timeout(work(), 50, file_name="slow.pdf")
    elapsed = time.perf_counter() - t0
    assert elapsed < 1.0
    assert state == {"cancelled": True, "finished": False}
    assert exc.value.timeout_ms == 50
    assert exc.value.file_name == "slow.pdf"


async def test_timer_preempts_blocking_work_in_a_thread():
    async def work() -> str:
        await asyncio.to_thread(time.sleep, 0.4)
        return "late"

    t0 = time.perf_counter()
    with pytest.raises(ExtractionTimeoutError):
        await run_with_timeout(work(), 50)
    assert time.perf_counter() - t0 < 0.35
