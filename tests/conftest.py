from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

# Ensure src/ is on sys.path so tests run without an editable install.
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Shared fakes live next to this file.
TESTS = Path(__file__).resolve().parent
if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))


@pytest.fixture
def anyio_backend() -> str:
    # the extractor is built on asyncio primitives
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_pdfsalvage_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "PDFSALVAGE_MAX_PAGES",
        "PDFSALVAGE_TIMEOUT_MS",
        "PDFSALVAGE_ALT_PAGE_LIMIT",
        "PDFSALVAGE_MAX_FILE_MB",
        "PDFSALVAGE_REQUIRE_HEADER",
        "PDFSALVAGE_BACKEND",
        "PDFSALVAGE_LOG_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
