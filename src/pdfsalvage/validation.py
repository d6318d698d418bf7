"""Input checks run before any decode attempt, plus output sanitising."""

from __future__ import annotations

import hashlib
import mimetypes
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationError
from .models import DocumentSource

PDF_MIME = "application/pdf"
TEXT_MIME = "text/plain"
PDF_MAGIC = b"%PDF-"
PDF_EXTENSIONS = (".pdf",)


class ValidationLimits(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_file_size: int = Field(10 * 1024 * 1024, gt=0, description="Maximum input size in bytes")
    allowed_mime_types: tuple[str, ...] = (PDF_MIME, TEXT_MIME)
    max_text_length: int = Field(1_000_000, gt=0, description="Extracted text is truncated past this")
    require_pdf_header: bool = False


def format_file_size(size: int, decimals: int = 2) -> str:
    """Human readable size, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    value = float(size)
    i = 0
    while value >= 1024 and i < len(units) - 1:
        value /= 1024
        i += 1
    return f"{round(value, decimals):g} {units[i]}"


def guess_mime_type(file_name: str) -> str | None:
    mime, _ = mimetypes.guess_type(file_name)
    return mime


def file_sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sniff_mime_type(data: bytes) -> str | None:
    """MIME type from leading magic bytes, for names without an extension."""
    if data.startswith(PDF_MAGIC):
        return PDF_MIME
    return None


def has_pdf_header(data: bytes) -> bool:
    return data.startswith(PDF_MAGIC)


def validate_source(source: DocumentSource, limits: ValidationLimits) -> str:
    """Reject unsupported or oversized input; return the effective MIME type.

    The size bound applies to whichever is larger, the bytes actually
    handed in or the size the caller declared. A PDF without the ``%PDF-``
    signature is only rejected when ``require_pdf_header`` is set; by
    default it runs the ladder like any other damaged upload.
    """
    name = source.file_name
    if not source.data or source.file_size <= 0:
        raise ValidationError("no file content provided", file_name=name)
    size = max(len(source.data), source.file_size)
    if size > limits.max_file_size:
        raise ValidationError(
            f"file size ({format_file_size(size)}) exceeds maximum allowed size "
            f"({format_file_size(limits.max_file_size)})",
            file_name=name,
        )
    mime = source.mime_type or guess_mime_type(name) or sniff_mime_type(source.data) or "unknown"
    if mime not in limits.allowed_mime_types:
        raise ValidationError(f"file type '{mime}' is not supported", file_name=name)
    if mime == PDF_MIME:
        suffix = PurePath(name).suffix.lower()
        if suffix and suffix not in PDF_EXTENSIONS:
            raise ValidationError(f"invalid file extension: {suffix}", file_name=name)
        if limits.require_pdf_header and not has_pdf_header(source.data):
            raise ValidationError("file header does not match the PDF signature", file_name=name)
    return mime


def sanitize_text(text: str, max_length: int) -> str:
    """Truncate to ``max_length`` and drop angle brackets."""
    if len(text) > max_length:
        text = text[:max_length]
    return text.replace("<", "").replace(">", "")
