"""Data model shared by every extraction tier.

All objects here live for a single extraction call. Nothing is cached
between calls.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .quality import count_words


@dataclass(frozen=True)
class TextRun:
    """Positioned fragment of decoded text.

    ``position`` is ``(x, y)`` in document space with ``y`` growing upwards,
    so a larger ``y`` sits higher on the page.
    """

    content: str
    position: tuple[float, float]

    @property
    def x(self) -> float:
        return self.position[0]

    @property
    def y(self) -> float:
        return self.position[1]


@dataclass(frozen=True)
class Page:
    text: str
    page_number: int  # 1-indexed


class ParseOptions(BaseModel):
    """Per-invocation limits for the extraction ladder."""

    model_config = ConfigDict(frozen=True)

    max_pages: int = Field(1000, gt=0, description="Page ceiling for the primary tier")
    timeout_ms: int = Field(60000, gt=0, description="Wall-clock budget for all tiers")
    alternative_page_limit: int = Field(50, gt=0, description="Page ceiling for the alternative tier")


@dataclass(frozen=True)
class DecodeOptions:
    """Options forwarded to the document decoder."""

    enable_streaming: bool = True
    enable_range_fetch: bool = True
    enable_auto_fetch: bool = True
    disable_item_combination: bool = False

    @classmethod
    def default(cls) -> DecodeOptions:
        return cls()

    @classmethod
    def conservative(cls) -> DecodeOptions:
        return cls(
            enable_streaming=False,
            enable_range_fetch=False,
            enable_auto_fetch=False,
            disable_item_combination=True,
        )

    @property
    def is_conservative(self) -> bool:
        return not (self.enable_streaming or self.enable_range_fetch or self.enable_auto_fetch)


@dataclass(frozen=True)
class DocumentSource:
    """The original file a caller handed in.

    Tiers never share a buffer: each one calls :meth:`fresh_buffer` and
    receives its own single-use stream over the immutable bytes.
    """

    data: bytes
    file_name: str
    file_size: int
    mime_type: str | None = None

    def fresh_buffer(self) -> io.BytesIO:
        return io.BytesIO(self.data)


@dataclass(frozen=True)
class DocumentMetadata:
    title: str | None = None
    author: str | None = None
    keywords: list[str] | None = None
    creation_date: str | None = None
    modification_date: str | None = None
    producer: str | None = None
    creator: str | None = None


class ExtractionTier(str, Enum):
    PRIMARY = "primary"
    ALTERNATIVE = "alternative"
    RAW_FALLBACK = "raw_fallback"
    PLAIN_TEXT = "plain_text"


@dataclass
class ExtractionResult:
    """Successful outcome of :meth:`PdfTextExtractor.extract`.

    ``pages`` is never empty and ``page_number`` strictly increases.
    """

    tier: ExtractionTier
    pages: list[Page]
    file_name: str
    warnings: list[str] = field(default_factory=list)
    file_hash: str = ""

    @property
    def text(self) -> str:
        return "\n\n".join(p.text for p in self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def word_count(self) -> int:
        return sum(count_words(p.text) for p in self.pages)
