"""
Exam Block Validation Utilities

Validates decoded exam.md blocks against the CourseExam format.

Two levels:
- Basic checks (always): required fields, type/choices pairing, tag
  format, positive integer points, non-empty answer.
- Strict mode: additionally runs the JSON Schema definitions through
  ``jsonschema`` and reports every schema error.

Unlike the hard-fail guards in exam_md.guards, these checks are optional
and only run when the pipeline is configured with ``strict_schema``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import jsonschema

from ..models.blocks import ExamDocument
from .definitions import (
    EXAM_ID_PATTERN,
    EXAM_METADATA_SCHEMA,
    QUESTION_BLOCK_SCHEMA,
    QUESTION_TYPES,
    TAG_PATTERN,
)

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when a block fails exam-format validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _is_int(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value) and value.is_integer()


def metadata_issues(data: Mapping[str, Any]) -> list[str]:
    """Return basic-check problems for a metadata block (empty if valid)."""
    issues: list[str] = []

    exam_id = data.get("exam_id")
    if not isinstance(exam_id, str) or not EXAM_ID_PATTERN.fullmatch(exam_id):
        issues.append(f"exam_id: invalid slug {exam_id!r}")

    for field in ("test_paper_name", "course", "institution"):
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            issues.append(f"{field}: must be a non-empty string")

    for field in ("year", "score_total", "num_questions"):
        if not _is_int(data.get(field)):
            issues.append(f"{field}: must be an integer, got {data.get(field)!r}")

    return issues


def question_issues(data: Mapping[str, Any]) -> list[str]:
    """Return basic-check problems for a question block (empty if valid)."""
    issues: list[str] = []

    problem_id = data.get("problem_id")
    if not isinstance(problem_id, str) or not problem_id.strip():
        issues.append(f"problem_id: must be a non-empty string, got {problem_id!r}")

    points = data.get("points")
    if not _is_int(points) or points <= 0:
        issues.append(f"points: must be a positive integer, got {points!r}")

    qtype = data.get("type")
    if qtype not in QUESTION_TYPES:
        issues.append(f"type: must be one of {', '.join(QUESTION_TYPES)}, got {qtype!r}")

    tags = data.get("tags")
    if not isinstance(tags, list) or not tags:
        issues.append("tags: must be a non-empty list")
    else:
        bad = [t for t in tags if not isinstance(t, str) or not TAG_PATTERN.fullmatch(t)]
        if bad:
            issues.append(f"tags: invalid tag(s) {bad!r}")
        if len(set(map(str, tags))) != len(tags):
            issues.append("tags: duplicate entries")

    answer = data.get("answer")
    if not isinstance(answer, str) or not answer.strip():
        issues.append("answer: must be a non-empty string")

    choices = data.get("choices")
    if qtype == "ExactMatch":
        if not isinstance(choices, list) or not all(isinstance(c, str) for c in choices):
            issues.append("choices: ExactMatch questions need a list of strings")
    elif qtype == "Freeform":
        if "choices" in data:
            issues.append("choices: not allowed on Freeform questions")
        if not data.get("llm_judge_instructions"):
            logger.warning(
                f"Freeform question {problem_id!r} has no llm_judge_instructions"
            )

    return issues


def _schema_errors(data: Mapping[str, Any], schema: dict) -> list[str]:
    validator = jsonschema.Draft202012Validator(schema)
    errors = []
    for error in sorted(validator.iter_errors(dict(data)), key=lambda e: list(e.absolute_path)):
        where = ".".join(str(p) for p in error.absolute_path)
        errors.append(f"{where}: {error.message}" if where else error.message)
    return errors


def validate_exam_metadata(data: Mapping[str, Any], *, strict: bool = False) -> None:
    """
    Validate a metadata block.

    Args:
        data: Decoded metadata object
        strict: If True, also validate against the JSON Schema

    Raises:
        ValidationError: If data is invalid
    """
    issues = metadata_issues(data)
    if strict and not issues:
        issues = _schema_errors(data, EXAM_METADATA_SCHEMA)
    if issues:
        raise ValidationError(
            f"Invalid exam metadata: {'; '.join(issues)}",
            path="metadata",
            errors=issues,
        )


def validate_question_block(data: Mapping[str, Any], *, strict: bool = False) -> None:
    """
    Validate a single question block.

    Args:
        data: Decoded question object
        strict: If True, also validate against the JSON Schema

    Raises:
        ValidationError: If data is invalid
    """
    issues = question_issues(data)
    if strict and not issues:
        issues = _schema_errors(data, QUESTION_BLOCK_SCHEMA)
    if issues:
        raise ValidationError(
            f"Invalid question {data.get('problem_id', '?')}: {'; '.join(issues)}",
            path=f"question[{data.get('problem_id', '?')}]",
            errors=issues,
        )


def validate_document_blocks(document: ExamDocument, *, strict: bool = False) -> None:
    """
    Validate every block of a parsed document, reporting all problems.

    Raises:
        ValidationError: Listing every problem found, each prefixed with
            the block it belongs to.
    """
    errors: list[str] = []

    if document.metadata is None:
        errors.append("metadata: no metadata block found")
    else:
        try:
            validate_exam_metadata(document.metadata.data, strict=strict)
        except ValidationError as e:
            errors.extend(f"metadata.{issue}" for issue in e.errors)

    for block in document.questions:
        try:
            validate_question_block(block.data, strict=strict)
        except ValidationError as e:
            errors.extend(f"question {block.label}: {issue}" for issue in e.errors)

    if errors:
        raise ValidationError(
            f"Exam format validation failed with {len(errors)} problem(s): "
            + "; ".join(errors),
            errors=errors,
        )
