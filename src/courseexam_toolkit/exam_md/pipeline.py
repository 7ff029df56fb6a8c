"""
Module: exam_md.pipeline

Purpose:
    Single-pass exam.md validation: Parse -> Check & Normalize -> Guard.
    The caller gets either the publishable document or an exception.

Key Functions:
    - validate_exam_markdown(): Full run returning a ValidationResult
    - finalize_exam_markdown(): Pre-publish gate returning only the text

Key Classes:
    - ValidationResult: Output text plus what was found and changed

Used By:
    - cli: `courseexam validate`
    - publishing.staging: Gate before files are written

Nothing here holds state between calls; concurrent callers need no
coordination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from courseexam_toolkit.core.schemas.validator import validate_document_blocks

from .checker import InvariantReport, check_invariants
from .config import DEFAULT_CONFIG, ExamValidationConfig
from .guards import run_guards
from .normalizer import BlockRewrite, apply_rewrites, plan_rewrites
from .parser import parse_exam_markdown

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Result of validating one exam.md document.

    Attributes:
        text: Normalized document (the input itself if nothing changed)
        report: Invariant report for the input, before normalization
        rewrites: Block rewrites that were applied
    """
    text: str
    report: InvariantReport
    rewrites: List[BlockRewrite] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.rewrites)

    @property
    def question_count(self) -> int:
        return self.report.question_count


def validate_exam_markdown(
    text: str,
    *,
    config: ExamValidationConfig | None = None,
) -> ValidationResult:
    """
    Normalize an exam.md document and run the hard-fail guards.

    Pipeline:
    1. Parse fenced JSON blocks
    2. Check invariants and plan rewrites (tags, metadata counters)
    3. Apply rewrites (rightmost first)
    4. Re-parse the output and run the guards
    5. Strict mode only: validate every block against the exam schema

    Args:
        text: exam.md content.
        config: Optional validation config.

    Returns:
        ValidationResult with the publishable text.

    Raises:
        ExamValidationError: If a guard fails (fractional points, missing
            answers).
        ValidationError: In strict mode, if a block violates the format.

    Example:
        >>> result = validate_exam_markdown(exam_md)
        >>> result.changed
        False
    """
    config = config or DEFAULT_CONFIG

    document = parse_exam_markdown(text)
    report = check_invariants(document)
    rewrites = plan_rewrites(document, config)

    output = apply_rewrites(text, rewrites) if rewrites else text
    for rewrite in rewrites:
        logger.debug(f"Normalized block {rewrite.label}: {rewrite.reason}")

    final_document = parse_exam_markdown(output) if rewrites else document
    run_guards(final_document)

    if config.strict_schema:
        validate_document_blocks(final_document, strict=True)

    return ValidationResult(text=output, report=report, rewrites=rewrites)


def finalize_exam_markdown(text: str, *, config: ExamValidationConfig | None = None) -> str:
    """Return the normalized document, raising if it may not be published."""
    return validate_exam_markdown(text, config=config).text
