"""Last-resort tier: read the file as plain bytes.

Some uploads labelled as PDF are really text with a PDF header bolted on,
or carry enough literal text to be useful. When nothing readable
survives, a placeholder page explains the failure so callers always get
something displayable.
"""

from __future__ import annotations

import asyncio
import logging
import re

from .models import DocumentSource, Page
from .validation import format_file_size

logger = logging.getLogger(__name__)

MIN_RAW_TEXT_LENGTH = 200
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\r\t]")

PLACEHOLDER_TEMPLATE = """\
This PDF document ({file_name}, {size}) could not be fully processed due to compatibility issues.

Key information:
- The PDF may be using advanced features or an unsupported encoding
- It may contain scanned images rather than text
- It could be protected or using uncommon formatting

Try with a different PDF file or convert this document to a more compatible format.

[PDF Processing Information]
File: {file_name}
Size: {size}
Type: {mime_type}"""


def clean_raw_text(data: bytes) -> str:
    """Decode bytes leniently and blank out everything non-printable."""
    text = data.decode("utf-8", errors="replace")
    return _NON_PRINTABLE.sub(" ", text).strip()


def looks_like_container(text: str) -> bool:
    return "%PDF-" in text or "endobj" in text


def placeholder_text(source: DocumentSource) -> str:
    return PLACEHOLDER_TEMPLATE.format(
        file_name=source.file_name,
        size=format_file_size(source.file_size),
        mime_type=source.mime_type or "unknown",
    )


class RawFallbackReader:
    """Best-effort reader that never raises."""

    def _read(self, source: DocumentSource) -> str:
        buffer = source.fresh_buffer()
        return clean_raw_text(buffer.read())

    async def read(self, source: DocumentSource) -> Page:
        try:
            cleaned = await asyncio.to_thread(self._read, source)
        except Exception as e:  # noqa: BLE001
            logger.warning("raw_fallback_read_error file=%s error=%r", source.file_name, e)
            cleaned = ""
        if len(cleaned) > MIN_RAW_TEXT_LENGTH and not looks_like_container(cleaned):
            logger.warning("raw_fallback_text file=%s chars=%s", source.file_name, len(cleaned))
            return Page(text=cleaned, page_number=1)
        logger.warning(
            "raw_fallback_placeholder file=%s size=%s chars=%s",
            source.file_name,
            source.file_size,
            len(cleaned),
        )
        return Page(text=placeholder_text(source), page_number=1)
