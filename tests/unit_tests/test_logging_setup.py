import logging

import pytest

from pdfsalvage import logging_setup
from pdfsalvage.logging_setup import TRACE_LEVEL, log_call, setup_logging

pytestmark = pytest.mark.anyio


@pytest.fixture
def fresh_root():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    configured = getattr(setup_logging, "_configured", False)
    setup_logging._configured = False  # type: ignore[attr-defined]
    yield root
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(saved_level)
    setup_logging._configured = configured  # type: ignore[attr-defined]


def test_log_dir_enables_rotating_files(fresh_root, monkeypatch, tmp_path):
    monkeypatch.setenv("PDFSALVAGE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_LEVEL", "trace")
    setup_logging()
    assert fresh_root.level == TRACE_LEVEL
    assert (tmp_path / "logs").is_dir()
    names = {getattr(h, "baseFilename", "") for h in fresh_root.handlers}
    assert any(n.endswith("pdfsalvage.log") for n in names)
    assert any(n.endswith("pdfsalvage-debug.log") for n in names)


def test_setup_is_one_shot(fresh_root):
    setup_logging()
    count = len(fresh_root.handlers)
    setup_logging()
    assert len(fresh_root.handlers) == count


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert logging_setup._resolve_level() == logging.INFO


def test_log_call_records_enter_and_exit(caplog):
    @log_call(logging.INFO)
    def add(a, b):
        return a + b

    with caplog.at_level(logging.INFO):
        assert add(2, 3) == 5
    messages = [r.getMessage() for r in caplog.records]
    assert any(m.startswith("call_enter") and "add" in m for m in messages)
    assert any(m.startswith("call_exit") and m.endswith("result=5") for m in messages)


async def test_log_call_reraises_from_coroutines(caplog):
    @log_call()
    async def explode():
        raise LookupError("missing")

    with caplog.at_level(logging.DEBUG), pytest.raises(LookupError):
        await explode()
    assert any("call_error" in r.getMessage() for r in caplog.records)


def test_shorten_truncates_long_reprs():
    assert logging_setup._shorten("x" * 500, limit=20).endswith("...")
    assert len(logging_setup._shorten("x" * 500, limit=20)) == 20


def test_trace_level_is_registered_without_patching_logger():
    assert logging.getLevelName(TRACE_LEVEL) == "TRACE"
    assert not hasattr(logging.Logger, "trace")


def test_shorten_bounds_large_payloads():
    assert len(logging_setup._shorten(b"%PDF-" + b"x" * 100_000)) <= 120
