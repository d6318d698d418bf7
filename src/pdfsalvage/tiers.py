"""Decode-based extraction tiers.

Each tier opens its own buffer from the original :class:`DocumentSource`,
walks the pages and returns a typed outcome instead of raising, so the
orchestrator can decide the next transition by looking at the variant.

Per-page work is a lazy sequence of :class:`PageAttempt`; a page that
fails to decode, or whose runs are leaked container syntax, is logged and
dropped without affecting its neighbours.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass, field

from .decoders import DocumentDecoder, DocumentHandle
from .errors import DecodeError, ExtractionEmptyError, ExtractionError, StructureLeakDetected
from .leak import is_structure_leak
from .models import DecodeOptions, DocumentSource, ExtractionTier, Page, ParseOptions, TextRun
from .quality import is_meaningful
from .reconstruct import concat_runs, raw_page_text, reconstruct_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageAttempt:
    page_number: int
    page: Page | None = None
    error: ExtractionError | None = None

    @property
    def ok(self) -> bool:
        return self.page is not None


@dataclass
class TierAccepted:
    tier: ExtractionTier
    pages: list[Page]
    warnings: list[str] = field(default_factory=list)


@dataclass
class TierRejected:
    tier: ExtractionTier
    error: ExtractionError
    warnings: list[str] = field(default_factory=list)


TierOutcome = TierAccepted | TierRejected


class _DecodeTier:
    """Shared page walk for the primary and alternative tiers."""

    tier: ExtractionTier
    decode_options: DecodeOptions

    def __init__(self, decoder: DocumentDecoder) -> None:
        self._decoder = decoder

    def page_limit(self, options: ParseOptions) -> int:
        raise NotImplementedError

    def render(self, runs: Sequence[TextRun]) -> str:
        raise NotImplementedError

    async def _open(self, source: DocumentSource) -> DocumentHandle:
        buffer = source.fresh_buffer()
        try:
            return await asyncio.to_thread(self._decoder.open, buffer, self.decode_options)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"{self._decoder.name} open error: {e}", file_name=source.file_name) from e

    async def _attempt_page(self, doc: DocumentHandle, page_number: int, file_name: str) -> PageAttempt:
        def fetch() -> list[TextRun]:
            return list(doc.get_page(page_number).get_text_runs())

        try:
            runs = await asyncio.to_thread(fetch)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "page_decode_error tier=%s file=%s page=%s error=%r",
                self.tier.value,
                file_name,
                page_number,
                e,
            )
            return PageAttempt(page_number, error=DecodeError(f"page {page_number}: {e}", file_name=file_name))
        if is_structure_leak(raw_page_text(runs)):
            logger.warning(
                "page_structure_leak tier=%s file=%s page=%s runs=%s",
                self.tier.value,
                file_name,
                page_number,
                len(runs),
            )
            return PageAttempt(
                page_number,
                error=StructureLeakDetected(f"page {page_number} is container syntax", file_name=file_name),
            )
        text = self.render(runs).strip()
        if not text:
            return PageAttempt(
                page_number,
                error=ExtractionEmptyError(f"page {page_number} has no text", file_name=file_name),
            )
        return PageAttempt(page_number, page=Page(text=text, page_number=page_number))

    async def iter_pages(
        self, doc: DocumentHandle, limit: int, file_name: str
    ) -> AsyncIterator[PageAttempt]:
        for page_number in range(1, limit + 1):
            yield await self._attempt_page(doc, page_number, file_name)

    async def _collect(self, source: DocumentSource, options: ParseOptions) -> tuple[list[Page], list[str]]:
        doc = await self._open(source)
        abandoned = False
        try:
            total = doc.page_count()
            limit = min(total, self.page_limit(options))
            logger.info(
                "tier_start tier=%s file=%s pages=%s processing=%s",
                self.tier.value,
                source.file_name,
                total,
                limit,
            )
            pages: list[Page] = []
            warnings: list[str] = []
            async for attempt in self.iter_pages(doc, limit, source.file_name):
                if attempt.ok:
                    pages.append(attempt.page)  # type: ignore[arg-type]
                elif not isinstance(attempt.error, ExtractionEmptyError):
                    warnings.append(f"{self.tier.value}: {attempt.error}")
            if total > limit:
                warnings.append(f"{self.tier.value}: processed {limit} of {total} pages")
            return pages, warnings
        except asyncio.CancelledError:
            # a worker thread may still hold the handle; leave it to the GC
            abandoned = True
            raise
        finally:
            if not abandoned:
                try:
                    doc.close()
                except Exception:  # noqa: BLE001
                    logger.debug("document_close_failed tier=%s file=%s", self.tier.value, source.file_name)

    async def run(self, source: DocumentSource, options: ParseOptions) -> TierOutcome:
        raise NotImplementedError


class PrimaryExtractor(_DecodeTier):
    """Default decode options, layout-aware reconstruction, content check."""

    tier = ExtractionTier.PRIMARY
    decode_options = DecodeOptions.default()

    def __init__(
        self,
        decoder: DocumentDecoder,
        validator: Callable[[str], bool] = is_meaningful,
    ) -> None:
        super().__init__(decoder)
        self._validator = validator

    def page_limit(self, options: ParseOptions) -> int:
        return options.max_pages

    def render(self, runs: Sequence[TextRun]) -> str:
        return reconstruct_lines(runs)

    async def run(self, source: DocumentSource, options: ParseOptions) -> TierOutcome:
        t0 = time.perf_counter()
        try:
            pages, warnings = await self._collect(source, options)
        except DecodeError as e:
            logger.warning("tier_decode_error tier=%s file=%s error=%s", self.tier.value, source.file_name, e)
            return TierRejected(self.tier, e)
        text = "\n\n".join(p.text for p in pages)
        if not pages or not self._validator(text):
            logger.info(
                "tier_rejected tier=%s file=%s pages=%s chars=%s",
                self.tier.value,
                source.file_name,
                len(pages),
                len(text),
            )
            err = ExtractionEmptyError(
                "no meaningful text extracted" if pages else "no text extracted",
                file_name=source.file_name,
            )
            return TierRejected(self.tier, err, warnings)
        logger.info(
            "tier_success tier=%s file=%s pages=%s chars=%s ms=%.1f",
            self.tier.value,
            source.file_name,
            len(pages),
            len(text),
            (time.perf_counter() - t0) * 1000.0,
        )
        return TierAccepted(self.tier, pages, warnings)


class AlternativeExtractor(_DecodeTier):
    """Conservative decode options, tighter page cap, plain concatenation."""

    tier = ExtractionTier.ALTERNATIVE
    decode_options = DecodeOptions.conservative()

    def page_limit(self, options: ParseOptions) -> int:
        return options.alternative_page_limit

    def render(self, runs: Sequence[TextRun]) -> str:
        return concat_runs(runs)

    async def run(self, source: DocumentSource, options: ParseOptions) -> TierOutcome:
        t0 = time.perf_counter()
        try:
            pages, warnings = await self._collect(source, options)
        except DecodeError as e:
            logger.warning("tier_decode_error tier=%s file=%s error=%s", self.tier.value, source.file_name, e)
            return TierRejected(self.tier, e)
        if not pages:
            logger.info("tier_rejected tier=%s file=%s pages=0", self.tier.value, source.file_name)
            err = ExtractionEmptyError("no text could be extracted with conservative options", file_name=source.file_name)
            return TierRejected(self.tier, err, warnings)
        logger.info(
            "tier_success tier=%s file=%s pages=%s ms=%.1f",
            self.tier.value,
            source.file_name,
            len(pages),
            (time.perf_counter() - t0) * 1000.0,
        )
        return TierAccepted(self.tier, pages, warnings)
