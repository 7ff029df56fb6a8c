"""
Schemas Package

JSON schema definitions and validation utilities for exam.md blocks.
"""

from .definitions import (
    EXAM_METADATA_SCHEMA,
    QUESTION_BLOCK_SCHEMA,
    QUESTION_TYPES,
    TAG_PATTERN,
)
from .validator import (
    validate_document_blocks,
    validate_exam_metadata,
    validate_question_block,
    ValidationError,
)

__all__ = [
    "EXAM_METADATA_SCHEMA",
    "QUESTION_BLOCK_SCHEMA",
    "QUESTION_TYPES",
    "TAG_PATTERN",
    "validate_document_blocks",
    "validate_exam_metadata",
    "validate_question_block",
    "ValidationError",
]
