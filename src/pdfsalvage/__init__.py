"""Readable text from untrusted, possibly malformed PDF documents.

Extraction escalates through three tiers until one yields usable text:
1. Primary: default decoder options, layout-ordered lines, content check.
2. Alternative: conservative decoder options, fewer pages, plain joins.
3. Raw fallback: the bytes read as text, or an explanatory placeholder.

The whole ladder runs under a single wall-clock budget.
"""

from __future__ import annotations

from .decoders import ExtractionBackend, detect_available_backends
from .errors import (
    DecodeError,
    ExtractionEmptyError,
    ExtractionError,
    ExtractionTimeoutError,
    ParsingFailed,
    StructureLeakDetected,
    ValidationError,
)
from .leak import is_structure_leak
from .logging_setup import setup_logging
from .models import (
    DecodeOptions,
    DocumentMetadata,
    ExtractionResult,
    ExtractionTier,
    Page,
    ParseOptions,
    TextRun,
)
from .orchestrator import PdfTextExtractor, extract_text
from .quality import is_meaningful
from .reconstruct import reconstruct_lines

__all__ = [
    "PdfTextExtractor",
    "extract_text",
    "ExtractionResult",
    "ExtractionTier",
    "ExtractionBackend",
    "detect_available_backends",
    "Page",
    "TextRun",
    "ParseOptions",
    "DecodeOptions",
    "DocumentMetadata",
    "reconstruct_lines",
    "is_structure_leak",
    "is_meaningful",
    "setup_logging",
    "ExtractionError",
    "ValidationError",
    "DecodeError",
    "StructureLeakDetected",
    "ExtractionEmptyError",
    "ExtractionTimeoutError",
    "ParsingFailed",
]
