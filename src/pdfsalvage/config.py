"""Environment-driven defaults.

Variables are read at call time, never at import, so tests can
monkeypatch the environment freely.

- ``PDFSALVAGE_MAX_PAGES``: primary tier page ceiling (default 1000)
- ``PDFSALVAGE_TIMEOUT_MS``: ladder wall-clock budget (default 60000)
- ``PDFSALVAGE_ALT_PAGE_LIMIT``: alternative tier page ceiling (default 50)
- ``PDFSALVAGE_MAX_FILE_MB``: upload size bound (default 10)
- ``PDFSALVAGE_REQUIRE_HEADER``: reject PDFs lacking the ``%PDF-`` magic (default 0)
- ``PDFSALVAGE_BACKEND``: ``pymupdf`` or ``pypdf`` (default: first installed)
"""

from __future__ import annotations

import os

from pydantic import ValidationError as PydanticValidationError

from .models import ParseOptions
from .validation import ValidationLimits

_MB = 1024 * 1024


def _env_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def load_parse_options() -> ParseOptions:
    values: dict[str, int] = {}
    for env, key in (
        ("PDFSALVAGE_MAX_PAGES", "max_pages"),
        ("PDFSALVAGE_TIMEOUT_MS", "timeout_ms"),
        ("PDFSALVAGE_ALT_PAGE_LIMIT", "alternative_page_limit"),
    ):
        v = _env_int(env)
        if v is not None:
            values[key] = v
    try:
        return ParseOptions(**values)
    except PydanticValidationError as e:
        raise ValueError(f"invalid parse options from environment: {e}") from e


def load_validation_limits() -> ValidationLimits:
    values: dict[str, object] = {}
    max_mb = _env_int("PDFSALVAGE_MAX_FILE_MB")
    if max_mb is not None:
        values["max_file_size"] = max_mb * _MB
    require = os.getenv("PDFSALVAGE_REQUIRE_HEADER")
    if require is not None:
        values["require_pdf_header"] = require.strip().lower() in ("1", "true", "yes", "on")
    try:
        return ValidationLimits(**values)
    except PydanticValidationError as e:
        raise ValueError(f"invalid validation limits from environment: {e}") from e


def configured_backend() -> str | None:
    raw = os.getenv("PDFSALVAGE_BACKEND", "").strip().lower()
    return raw or None
