"""Source document text extraction."""

from .text import (
    SourceExtractionError,
    UnsupportedFileTypeError,
    extract_text_from_file,
    extract_text_from_pdf,
)

__all__ = [
    "SourceExtractionError",
    "UnsupportedFileTypeError",
    "extract_text_from_file",
    "extract_text_from_pdf",
]
