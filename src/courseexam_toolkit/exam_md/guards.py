"""
Module: exam_md.guards

Purpose:
    Hard-fail checks run on the normalized exam.md document. They never
    repair anything: fractional points must be rescaled and missing
    answers filled in upstream, before the document is published.

Key Functions:
    - assert_integer_points(): Reject the first fractional ``points``
    - assert_non_empty_answers(): Reject every blank/missing ``answer`` at once
    - run_guards(): Run both, reporting all failures together

Used By:
    - exam_md.pipeline
    - publishing.staging
"""

from __future__ import annotations

from courseexam_toolkit.core.models.blocks import ExamDocument

from .checker import has_answer, is_non_integer_points
from .errors import (
    ExamValidationError,
    GuardFailure,
    MissingAnswersError,
    NonIntegerPointsError,
)
from .parser import parse_exam_markdown


def _as_document(exam_md: str | ExamDocument) -> ExamDocument:
    if isinstance(exam_md, ExamDocument):
        return exam_md
    return parse_exam_markdown(exam_md)


def assert_integer_points(exam_md: str | ExamDocument) -> None:
    """
    Fail if any question has fractional or non-finite ``points``.

    Missing or non-numeric points are not this guard's concern.

    Raises:
        NonIntegerPointsError: For the first offending question.
    """
    for block in _as_document(exam_md).questions:
        points = block.data.get("points")
        if is_non_integer_points(points):
            raise NonIntegerPointsError(block.label, points)


def assert_non_empty_answers(exam_md: str | ExamDocument) -> None:
    """
    Fail if any question's ``answer`` is missing, not a string, or blank.

    Raises:
        MissingAnswersError: Listing every offending problem_id.
    """
    missing = [block.label for block in _as_document(exam_md).questions if not has_answer(block.data)]
    if missing:
        raise MissingAnswersError(missing)


def run_guards(exam_md: str | ExamDocument) -> None:
    """
    Run every guard against one document.

    A single failure is re-raised as is; several are combined into a
    GuardFailure whose message carries each guard's message.

    Raises:
        ExamValidationError: If any guard fails.
    """
    document = _as_document(exam_md)
    failures: list[ExamValidationError] = []
    for guard in (assert_integer_points, assert_non_empty_answers):
        try:
            guard(document)
        except ExamValidationError as e:
            failures.append(e)

    if len(failures) == 1:
        raise failures[0]
    if failures:
        raise GuardFailure(failures)
