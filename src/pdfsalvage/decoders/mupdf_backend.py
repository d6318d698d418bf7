"""PyMuPDF (fitz) decoder backend."""

from __future__ import annotations

import io
import logging
from typing import Any

import fitz  # PyMuPDF

from ..errors import DecodeError
from ..models import DecodeOptions, DocumentMetadata, TextRun
from .base import clean_info_value, split_keywords

logger = logging.getLogger(__name__)


class PyMuPDFPage:
    def __init__(self, page: Any) -> None:
        self._page = page

    def get_text_runs(self) -> list[TextRun]:
        raise NotImplementedError

    def _flip(self, y: float) -> float:
        # fitz measures y downwards from the top edge
        return float(self._page.rect.height) - float(y)


class _CombinedPage(PyMuPDFPage):
    """One run per visual line as grouped by MuPDF."""

    def get_text_runs(self) -> list[TextRun]:
        data = self._page.get_text("dict")
        runs: list[TextRun] = []
        for block in data.get("blocks", []):
            if block.get("type", 0) != 0:  # image block
                continue
            for line in block.get("lines", []):
                spans = line.get("spans", [])
                if not spans:
                    continue
                text = "".join(s.get("text", "") for s in spans)
                x, y = spans[0].get("origin", (0.0, 0.0))
                runs.append(TextRun(text, (float(x), self._flip(y))))
        return runs


class _WordPage(PyMuPDFPage):
    """One run per word, no item combination."""

    def get_text_runs(self) -> list[TextRun]:
        runs: list[TextRun] = []
        for word in self._page.get_text("words"):
            x0, _y0, _x1, y1, text = word[:5]
            runs.append(TextRun(str(text), (float(x0), self._flip(y1))))
        return runs


class PyMuPDFDocument:
    def __init__(self, doc: Any, options: DecodeOptions) -> None:
        self._doc = doc
        self._options = options

    def page_count(self) -> int:
        return int(getattr(self._doc, "page_count", 0) or 0)

    def get_page(self, page_number: int) -> PyMuPDFPage:
        page = self._doc.load_page(page_number - 1)
        if self._options.disable_item_combination:
            return _WordPage(page)
        return _CombinedPage(page)

    def metadata(self) -> DocumentMetadata:
        info = self._doc.metadata or {}
        return DocumentMetadata(
            title=clean_info_value(info.get("title")),
            author=clean_info_value(info.get("author")),
            keywords=split_keywords(info.get("keywords")),
            creation_date=clean_info_value(info.get("creationDate")),
            modification_date=clean_info_value(info.get("modDate")),
            producer=clean_info_value(info.get("producer")),
            creator=clean_info_value(info.get("creator")),
        )

    def close(self) -> None:
        self._doc.close()


class PyMuPDFDecoder:
    """Decode documents with MuPDF.

    Conservative options make the decoder re-serialise the document with
    garbage collection before use, which rebuilds a damaged
    cross-reference table. Slower, but tolerant of broken offsets.
    """

    name = "pymupdf"

    def __init__(self) -> None:
        self._initialized = False

    def initialize(self) -> None:
        if self._initialized:
            return
        # MuPDF prints repair chatter to stderr; keep it in its own buffer.
        fitz.TOOLS.mupdf_display_errors(False)
        self._initialized = True

    def open(self, buffer: io.BytesIO, options: DecodeOptions) -> PyMuPDFDocument:
        data = buffer.read()
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DecodeError(f"pymupdf open error: {e}") from e
        if doc.needs_pass:
            doc.close()
            raise DecodeError("document is password protected")
        if options.is_conservative:
            try:
                rebuilt = doc.tobytes(garbage=3, clean=True)
            except Exception as e:
                doc.close()
                raise DecodeError(f"pymupdf rebuild error: {e}") from e
            doc.close()
            logger.debug("pymupdf_rebuilt bytes_in=%s bytes_out=%s", len(data), len(rebuilt))
            try:
                doc = fitz.open(stream=rebuilt, filetype="pdf")
            except Exception as e:
                raise DecodeError(f"pymupdf reopen error: {e}") from e
        return PyMuPDFDocument(doc, options)
