"""pypdf decoder backend."""

from __future__ import annotations

import io
from typing import Any

import pypdf

from ..errors import DecodeError
from ..models import DecodeOptions, DocumentMetadata, TextRun
from .base import clean_info_value, combine_adjacent_runs, split_keywords


class PypdfPage:
    def __init__(self, page: Any, combine: bool) -> None:
        self._page = page
        self._combine = combine

    def get_text_runs(self) -> list[TextRun]:
        runs: list[TextRun] = []

        def visitor(text: str, cm: list[float], tm: list[float], _font: Any, _size: Any) -> None:
            if not text:
                return
            # text space origin mapped through the current transformation matrix
            x = tm[4] * cm[0] + tm[5] * cm[2] + cm[4]
            y = tm[4] * cm[1] + tm[5] * cm[3] + cm[5]
            runs.append(TextRun(text, (float(x), float(y))))

        self._page.extract_text(visitor_text=visitor)
        if self._combine:
            return combine_adjacent_runs(runs)
        return runs


class PypdfDocument:
    def __init__(self, reader: pypdf.PdfReader, options: DecodeOptions) -> None:
        self._reader = reader
        self._options = options

    def page_count(self) -> int:
        return len(self._reader.pages)

    def get_page(self, page_number: int) -> PypdfPage:
        page = self._reader.pages[page_number - 1]
        return PypdfPage(page, combine=not self._options.disable_item_combination)

    def metadata(self) -> DocumentMetadata:
        info = self._reader.metadata
        if info is None:
            return DocumentMetadata()
        return DocumentMetadata(
            title=clean_info_value(info.get("/Title")),
            author=clean_info_value(info.get("/Author")),
            keywords=split_keywords(info.get("/Keywords")),
            creation_date=clean_info_value(info.get("/CreationDate")),
            modification_date=clean_info_value(info.get("/ModDate")),
            producer=clean_info_value(info.get("/Producer")),
            creator=clean_info_value(info.get("/Creator")),
        )

    def close(self) -> None:
        # PdfReader holds no OS resources for in-memory streams
        return None


class PypdfDecoder:
    """Decode documents with pypdf.

    Default options use a strict reader; conservative options switch to
    ``strict=False`` so pypdf rebuilds a broken cross-reference table by
    scanning the file for object headers.
    """

    name = "pypdf"

    def initialize(self) -> None:
        return None

    def open(self, buffer: io.BytesIO, options: DecodeOptions) -> PypdfDocument:
        try:
            reader = pypdf.PdfReader(buffer, strict=not options.is_conservative)
        except Exception as e:
            raise DecodeError(f"pypdf open error: {e}") from e
        if reader.is_encrypted:
            raise DecodeError("document is password protected")
        return PypdfDocument(reader, options)
