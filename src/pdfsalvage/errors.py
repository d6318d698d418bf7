"""Error taxonomy for the extraction ladder."""

from __future__ import annotations


class ExtractionError(RuntimeError):
    """Base class for every classified extraction failure."""

    def __init__(self, message: str, *, file_name: str | None = None) -> None:
        super().__init__(message)
        self.file_name = file_name


class ValidationError(ExtractionError):
    """Input rejected before any tier ran (type or size bounds)."""


class DecodeError(ExtractionError):
    """The document decoder failed while opening or paging the document."""


class StructureLeakDetected(ExtractionError):
    """Decoded text is raw container syntax rather than content."""


class ExtractionEmptyError(ExtractionError):
    """A tier produced zero usable pages."""


class ExtractionTimeoutError(ExtractionError):
    """The wall-clock budget for the whole ladder ran out."""

    def __init__(self, timeout_ms: int, *, file_name: str | None = None) -> None:
        super().__init__(f"extraction exceeded {timeout_ms} ms", file_name=file_name)
        self.timeout_ms = timeout_ms


class ParsingFailed(ExtractionError):
    """Every tier was exhausted without producing a page."""
