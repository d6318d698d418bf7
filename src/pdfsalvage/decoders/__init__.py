"""Document decoder backends.

Two interchangeable backends implement :class:`DocumentDecoder`:
1. PyMuPDF (fitz), preferred for spacing and layout fidelity.
2. pypdf, pure python, used when MuPDF is not installed or requested.

Backends are imported lazily so a missing optional library only removes
that backend from :func:`detect_available_backends`.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..errors import DecodeError
from .base import DocumentDecoder, DocumentHandle, PageHandle, combine_adjacent_runs

logger = logging.getLogger(__name__)


class ExtractionBackend(str, Enum):
    PYMUPDF = "pymupdf"  # PyMuPDF (fitz)
    PYPDF = "pypdf"


def detect_available_backends() -> list[ExtractionBackend]:
    available: list[ExtractionBackend] = []
    try:  # prefer PyMuPDF first (better layout/spacing fidelity)
        import fitz  # noqa: F401

        available.append(ExtractionBackend.PYMUPDF)
    except Exception:  # pragma: no cover
        pass
    try:  # pypdf
        import pypdf  # noqa: F401

        available.append(ExtractionBackend.PYPDF)
    except Exception:  # pragma: no cover
        pass
    return available


def build_decoder(backend: ExtractionBackend | str | None = None) -> DocumentDecoder:
    """Instantiate the requested backend, or the first available one."""
    detected = detect_available_backends()
    if backend is None:
        if not detected:
            raise DecodeError("no PDF decoder backend installed (install PyMuPDF or pypdf)")
        chosen = detected[0]
    else:
        try:
            chosen = ExtractionBackend(backend)
        except ValueError as e:
            raise DecodeError(f"unknown decoder backend: {backend!r}") from e
        if chosen not in detected:
            raise DecodeError(f"decoder backend not installed: {chosen.value}")
    logger.debug("decoder_selected backend=%s available=%s", chosen.value, [b.value for b in detected])
    if chosen is ExtractionBackend.PYMUPDF:
        from .mupdf_backend import PyMuPDFDecoder

        return PyMuPDFDecoder()
    from .pypdf_backend import PypdfDecoder

    return PypdfDecoder()


__all__ = [
    "DocumentDecoder",
    "DocumentHandle",
    "PageHandle",
    "ExtractionBackend",
    "build_decoder",
    "combine_adjacent_runs",
    "detect_available_backends",
]
