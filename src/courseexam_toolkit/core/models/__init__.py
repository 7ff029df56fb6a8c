"""
Core Models Package

Immutable models for a parsed exam.md document.

All models in this package are frozen dataclasses. The validation
pipeline never mutates a parsed block: normalization renders new JSON
text for the blocks that change and splices it into a new string.
"""

from .blocks import BlockKind, ExamBlock, ExamDocument, FencedJsonSpan, SourceSpan

__all__ = [
    "BlockKind",
    "ExamBlock",
    "ExamDocument",
    "FencedJsonSpan",
    "SourceSpan",
]
