"""Extraction orchestrator: the escalation ladder.

Init -> Primary -> Alternative -> RawFallback -> Done, with a timeout
reachable from every state. Each state runs at most once and the first
accepted outcome ends the ladder.

Only :class:`ValidationError` (before any tier) and
:class:`ExtractionTimeoutError` reach the caller; every tier failure is
turned into an escalation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from .config import configured_backend, load_parse_options, load_validation_limits
from .decoders import DocumentDecoder, build_decoder
from .errors import DecodeError, ParsingFailed
from .fallback import RawFallbackReader, placeholder_text
from .leak import is_structure_leak
from .logging_setup import log_call
from .models import (
    DecodeOptions,
    DocumentMetadata,
    DocumentSource,
    ExtractionResult,
    ExtractionTier,
    Page,
    ParseOptions,
    TextRun,
)
from .quality import is_meaningful
from .reconstruct import reconstruct_lines
from .tiers import AlternativeExtractor, PrimaryExtractor, TierAccepted, TierOutcome
from .timeout import run_with_timeout
from .validation import (
    PDF_MIME,
    TEXT_MIME,
    ValidationLimits,
    file_sha256,
    has_pdf_header,
    sanitize_text,
    validate_source,
)

logger = logging.getLogger(__name__)


class PdfTextExtractor:
    """Extract readable text from untrusted PDF bytes.

    Collaborators are injected; anything left out is built from the
    environment on first use (see :mod:`pdfsalvage.config`). Instances
    hold no per-document state and can serve concurrent calls.
    """

    def __init__(
        self,
        decoder: DocumentDecoder | None = None,
        options: ParseOptions | None = None,
        limits: ValidationLimits | None = None,
        raw_reader: RawFallbackReader | None = None,
        validator: Callable[[str], bool] = is_meaningful,
        leak_detector: Callable[[str], bool] = is_structure_leak,
    ) -> None:
        self._decoder = decoder
        self._options = options
        self._limits = limits
        self._raw_reader = raw_reader or RawFallbackReader()
        self._validator = validator
        self._leak_detector = leak_detector
        self._primary: PrimaryExtractor | None = None
        self._alternative: AlternativeExtractor | None = None
        self._initialized = False

    @property
    def decoder(self) -> DocumentDecoder:
        self.ensure_initialized()
        assert self._decoder is not None
        return self._decoder

    def ensure_initialized(self) -> None:
        """Resolve defaults and configure the decoder backend, once."""
        if self._initialized:
            return
        if self._decoder is None:
            self._decoder = build_decoder(configured_backend())
        if self._options is None:
            self._options = load_parse_options()
        if self._limits is None:
            self._limits = load_validation_limits()
        self._decoder.initialize()
        self._primary = PrimaryExtractor(self._decoder, validator=self._validator)
        self._alternative = AlternativeExtractor(self._decoder)
        self._initialized = True
        logger.info(
            "extractor_initialized backend=%s max_pages=%s timeout_ms=%s alt_page_limit=%s",
            getattr(self._decoder, "name", type(self._decoder).__name__),
            self._options.max_pages,
            self._options.timeout_ms,
            self._options.alternative_page_limit,
        )

    def _source(
        self,
        file_bytes: bytes,
        file_name: str,
        file_size: int | None,
        mime_type: str | None,
    ) -> DocumentSource:
        assert self._limits is not None
        source = DocumentSource(
            data=bytes(file_bytes),
            file_name=file_name,
            file_size=len(file_bytes) if file_size is None else file_size,
            mime_type=mime_type,
        )
        mime = validate_source(source, self._limits)
        return replace(source, mime_type=mime)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @log_call()
    async def extract(
        self,
        file_bytes: bytes,
        file_name: str,
        file_size: int | None = None,
        options: ParseOptions | None = None,
        mime_type: str | None = None,
    ) -> ExtractionResult:
        """Run the ladder for one file.

        Raises:
            ValidationError: unsupported type, empty or oversized input.
            ExtractionTimeoutError: ``options.timeout_ms`` elapsed first.
        """
        self.ensure_initialized()
        opts = options or self._options
        assert opts is not None
        source = self._source(file_bytes, file_name, file_size, mime_type)
        logger.info(
            "extract_start file=%s size=%s mime=%s",
            source.file_name,
            source.file_size,
            source.mime_type,
        )
        if source.mime_type == TEXT_MIME:
            work = self._read_plain_text(source)
        else:
            work = self._run_ladder(source, opts)
        result = await run_with_timeout(work, opts.timeout_ms, file_name=source.file_name)
        result.file_hash = file_sha256(source.data)
        if source.mime_type == PDF_MIME and not has_pdf_header(source.data):
            result.warnings.insert(0, "file header does not match the PDF signature")
        return self._finalize(result, source)

    async def extract_path(self, path: str | Path, options: ParseOptions | None = None) -> ExtractionResult:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(str(p))
        data = await asyncio.to_thread(p.read_bytes)
        return await self.extract(data, p.name, len(data), options=options)

    async def extract_page_range(
        self,
        file_bytes: bytes,
        file_name: str,
        start_page: int,
        end_page: int,
        options: ParseOptions | None = None,
    ) -> str:
        """Text of a 1-indexed page range, one ``--- Page N ---`` section each.

        The range is clamped to the document. Unreadable pages yield an
        empty section.

        Raises:
            DecodeError: the document cannot be opened.
        """
        self.ensure_initialized()
        opts = options or self._options
        assert opts is not None
        source = self._source(file_bytes, file_name, None, None)
        return await run_with_timeout(
            self._read_range(source, start_page, end_page),
            opts.timeout_ms,
            file_name=source.file_name,
        )

    async def read_metadata(self, file_bytes: bytes, file_name: str) -> DocumentMetadata:
        """Document info dictionary; empty metadata when unreadable."""
        self.ensure_initialized()
        source = self._source(file_bytes, file_name, None, None)

        def read() -> DocumentMetadata:
            doc = self.decoder.open(source.fresh_buffer(), DecodeOptions.default())
            try:
                return doc.metadata()
            finally:
                doc.close()

        try:
            return await asyncio.to_thread(read)
        except Exception as e:  # noqa: BLE001
            logger.warning("metadata_read_error file=%s error=%r", file_name, e)
            return DocumentMetadata()

    # ------------------------------------------------------------------
    # Ladder
    # ------------------------------------------------------------------

    def _accept(self, outcome: TierOutcome, source: DocumentSource, warnings: list[str]) -> ExtractionResult | None:
        warnings.extend(outcome.warnings)
        if not isinstance(outcome, TierAccepted):
            logger.info(
                "tier_escalate from=%s file=%s reason=%s",
                outcome.tier.value,
                source.file_name,
                type(outcome.error).__name__,
            )
            warnings.append(f"{outcome.tier.value}: {outcome.error}")
            return None
        full_text = "\n\n".join(p.text for p in outcome.pages)
        if self._leak_detector(full_text):
            logger.warning(
                "document_structure_leak tier=%s file=%s chars=%s",
                outcome.tier.value,
                source.file_name,
                len(full_text),
            )
            warnings.append(f"{outcome.tier.value}: decoded text is raw container syntax")
            return None
        return ExtractionResult(
            tier=outcome.tier,
            pages=outcome.pages,
            file_name=source.file_name,
            warnings=warnings,
        )

    async def _run_ladder(self, source: DocumentSource, options: ParseOptions) -> ExtractionResult:
        assert self._primary is not None and self._alternative is not None
        warnings: list[str] = []

        result = self._accept(await self._primary.run(source, options), source, warnings)
        if result is not None:
            return result

        result = self._accept(await self._alternative.run(source, options), source, warnings)
        if result is not None:
            return result

        page = await self._raw_reader.read(source)
        if not page.text.strip():
            raise ParsingFailed("all extraction tiers failed", file_name=source.file_name)
        return ExtractionResult(
            tier=ExtractionTier.RAW_FALLBACK,
            pages=[page],
            file_name=source.file_name,
            warnings=warnings,
        )

    async def _read_plain_text(self, source: DocumentSource) -> ExtractionResult:
        text = source.data.decode("utf-8", errors="replace").replace("\r\n", "\n").strip()
        if text:
            page = Page(text=text, page_number=1)
            tier = ExtractionTier.PLAIN_TEXT
        else:
            page = await self._raw_reader.read(source)
            tier = ExtractionTier.RAW_FALLBACK
        return ExtractionResult(tier=tier, pages=[page], file_name=source.file_name)

    async def _read_range(self, source: DocumentSource, start_page: int, end_page: int) -> str:
        try:
            doc = await asyncio.to_thread(self.decoder.open, source.fresh_buffer(), DecodeOptions.default())
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"open error: {e}", file_name=source.file_name) from e
        try:
            total = doc.page_count()
            if total <= 0:
                return ""
            start = max(1, min(start_page, total))
            end = max(start, min(end_page, total))
            sections: list[str] = []
            for n in range(start, end + 1):

                def fetch(page_number: int = n) -> list[TextRun]:
                    return list(doc.get_page(page_number).get_text_runs())

                try:
                    text = reconstruct_lines(await asyncio.to_thread(fetch))
                except Exception as e:  # noqa: BLE001
                    logger.warning("page_decode_error file=%s page=%s error=%r", source.file_name, n, e)
                    text = ""
                sections.append(f"--- Page {n} ---\n{text}\n")
            return "\n".join(sections)
        finally:
            doc.close()

    def _finalize(self, result: ExtractionResult, source: DocumentSource) -> ExtractionResult:
        """Apply the output text budget and strip markup characters."""
        assert self._limits is not None
        budget = self._limits.max_text_length
        truncated = False
        pages: list[Page] = []
        for page in result.pages:
            if budget <= 0:
                truncated = True
                break
            truncated = truncated or len(page.text) > budget
            text = sanitize_text(page.text, budget).strip()
            budget -= len(page.text)
            if text:
                pages.append(Page(text=text, page_number=page.page_number))
        if truncated:
            result.warnings.append(f"text truncated at {self._limits.max_text_length} characters")
        if not pages:
            # producing tier is kept
            pages = [Page(text=placeholder_text(source), page_number=1)]
            result.warnings.append(f"{result.tier.value}: no text left after sanitising")
        result.pages = pages
        logger.info(
            "extract_done file=%s tier=%s pages=%s words=%s warnings=%s",
            result.file_name,
            result.tier.value,
            result.page_count,
            result.word_count,
            len(result.warnings),
        )
        return result


async def extract_text(
    file_bytes: bytes,
    file_name: str,
    file_size: int | None = None,
    options: ParseOptions | None = None,
) -> ExtractionResult:
    """One-shot convenience wrapper around :class:`PdfTextExtractor`."""
    return await PdfTextExtractor().extract(file_bytes, file_name, file_size, options=options)
