"""In-memory decoder doubles for ladder tests."""

from __future__ import annotations

import io
import time
from collections.abc import Sequence

from pdfsalvage.models import DecodeOptions, DocumentMetadata, TextRun

PDF_HEADER = b"%PDF-1.7\n"

PROSE = [
    "The quick brown fox jumps over the lazy dog",
    "Pack my box with five dozen liquor jugs",
    "How vexingly quick daft zebras jump today",
]


def line_runs(lines: Sequence[str], top: float = 700.0, step: float = 14.0) -> list[TextRun]:
    """One run per word, laid out top to bottom, left to right."""
    runs: list[TextRun] = []
    for i, line in enumerate(lines):
        y = top - i * step
        x = 72.0
        for word in line.split():
            runs.append(TextRun(word, (x, y)))
            x += 6.0 * (len(word) + 1)
    return runs


class FakePage:
    def __init__(self, runs: Sequence[TextRun] = (), error: Exception | None = None) -> None:
        self._runs = list(runs)
        self._error = error

    def get_text_runs(self) -> list[TextRun]:
        if self._error is not None:
            raise self._error
        return list(self._runs)


class FakeDocument:
    def __init__(
        self,
        pages: Sequence[FakePage | Exception],
        metadata: DocumentMetadata | None = None,
    ) -> None:
        self._pages = list(pages)
        self._metadata = metadata or DocumentMetadata()
        self.requested: list[int] = []
        self.closed = False

    def page_count(self) -> int:
        return len(self._pages)

    def get_page(self, page_number: int) -> FakePage:
        self.requested.append(page_number)
        page = self._pages[page_number - 1]
        if isinstance(page, Exception):
            raise page
        return page

    def metadata(self) -> DocumentMetadata:
        return self._metadata

    def close(self) -> None:
        self.closed = True


class FakeDecoder:
    """Serves one document for default options and one for conservative.

    Either slot may hold an exception instead, which ``open`` raises.
    """

    name = "fake"

    def __init__(
        self,
        default: FakeDocument | Exception | None = None,
        conservative: FakeDocument | Exception | None = None,
        open_delay: float = 0.0,
        conservative_delay: float = 0.0,
    ) -> None:
        self.default = default
        self.conservative = conservative
        self.open_delay = open_delay
        self.conservative_delay = conservative_delay
        self.init_calls = 0
        self.opened: list[DecodeOptions] = []
        self.buffers: list[io.BytesIO] = []

    def initialize(self) -> None:
        self.init_calls += 1

    def open(self, buffer: io.BytesIO, options: DecodeOptions) -> FakeDocument:
        self.opened.append(options)
        self.buffers.append(buffer)
        buffer.read()  # consume like a real decoder would
        delay = self.conservative_delay if options.is_conservative else self.open_delay
        if delay:
            time.sleep(delay)
        slot = self.conservative if options.is_conservative else self.default
        if slot is None:
            raise ValueError("no document configured")
        if isinstance(slot, Exception):
            raise slot
        return slot


def prose_document(n_pages: int = 3) -> FakeDocument:
    return FakeDocument([FakePage(line_runs(PROSE)) for _ in range(n_pages)])
