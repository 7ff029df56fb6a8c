"""
Module: sources.text

Purpose:
    Extract plain text from uploaded exam and solution files so it can be
    handed to the exam.md generator. PDFs are read with PyMuPDF; text and
    markdown files are read as UTF-8.

Key Functions:
    - extract_text_from_file(): Dispatch on file suffix
    - extract_text_from_pdf(): Page-by-page PDF text

Dependencies:
    - fitz (PyMuPDF): PDF access

Used By:
    - cli: `courseexam extract-text`
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import fitz

logger = logging.getLogger(__name__)

PDF_SUFFIXES = (".pdf",)
TEXT_SUFFIXES = (".txt", ".md")


class SourceExtractionError(RuntimeError):
    """Raised when a source document cannot be read."""


class UnsupportedFileTypeError(ValueError):
    """Raised for files that are neither PDF nor plain text."""


def extract_text_from_pdf(pdf_path: Path) -> str:
    """
    Extract text from every page of a PDF.

    Args:
        pdf_path: Path to the PDF.

    Returns:
        Page texts joined with newlines, in page order.

    Raises:
        SourceExtractionError: If the PDF cannot be opened or read.
    """
    pages: List[str] = []
    try:
        with fitz.open(pdf_path) as doc:
            for page in doc:
                pages.append(page.get_text("text") or "")
    except (RuntimeError, ValueError) as e:
        raise SourceExtractionError(f"Failed to parse PDF {pdf_path.name}: {e}") from e

    logger.debug(f"Extracted {len(pages)} page(s) from {pdf_path.name}")
    return "\n".join(pages)


def extract_text_from_file(path: Path) -> str:
    """
    Extract text from an exam or solutions file.

    Args:
        path: .pdf, .txt or .md file.

    Returns:
        The document text.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        UnsupportedFileTypeError: For any other suffix.
        SourceExtractionError: If a PDF cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in PDF_SUFFIXES:
        return extract_text_from_pdf(path)
    if suffix in TEXT_SUFFIXES:
        return path.read_text(encoding="utf-8")
    raise UnsupportedFileTypeError(f"Unsupported file type: {path.name}")
