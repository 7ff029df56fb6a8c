"""
Module: exam_md.checker

Purpose:
    Compute the derived facts of a parsed exam.md document (point total,
    question count, tag validity, answer presence, integral points) and
    compare them with what the metadata block declares.

Key Functions:
    - check_invariants(): Build an InvariantReport for a document
    - compute_total_points(): Sum of finite numeric points
    - is_number() / is_integral() / is_non_integer_points() / has_answer():
      Per-value predicates

Key Classes:
    - QuestionFacts: Facts about one question block
    - InvariantReport: Aggregate facts and mismatch flags

Used By:
    - exam_md.normalizer: Counter repair targets
    - exam_md.guards: Integral points / answer presence
    - exam_md.pipeline: Reported alongside the normalized text

Counter mismatches and bad tags are normalization targets. Fractional
points and missing answers cannot be repaired here; the guards reject
them after normalization.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from courseexam_toolkit.core.models.blocks import ExamBlock, ExamDocument
from courseexam_toolkit.core.schemas.definitions import TAG_PATTERN


def is_number(value: Any) -> bool:
    """True for finite int/float values (bool is not a number here)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def is_integral(value: Any) -> bool:
    """True for numbers with no fractional part (5 and 5.0, not 2.5)."""
    if not is_number(value):
        return False
    return isinstance(value, int) or value.is_integer()


def is_non_integer_points(value: Any) -> bool:
    """
    True for float points that are fractional or not finite.

    JSON numbers too large for a double (e.g. 1e400) decode to inf, which
    is never an integer. Non-numeric values are not points at all here.
    """
    if not isinstance(value, float):
        return False
    return not (math.isfinite(value) and value.is_integer())


def is_valid_tag(tag: Any) -> bool:
    return isinstance(tag, str) and TAG_PATTERN.fullmatch(tag) is not None


def has_answer(data: Mapping[str, Any]) -> bool:
    answer = data.get("answer")
    return isinstance(answer, str) and len(answer.strip()) > 0


def compute_total_points(questions: Iterable[ExamBlock]) -> int | float:
    """
    Sum the numeric ``points`` of every question.

    Non-numeric or missing points contribute nothing. The result is an
    int whenever the sum is integral.
    """
    total: int | float = 0
    for block in questions:
        points = block.data.get("points")
        if is_number(points):
            total += points
    if isinstance(total, float) and total.is_integer():
        return int(total)
    return total


def counter_matches(declared: Any, computed: int | float) -> bool:
    """
    Whether a declared metadata counter equals the computed value.

    An integral computed value only matches a true int; "8" or 8.0 still
    need rewriting. A fractional computed value matches any equal number.
    """
    if isinstance(computed, int):
        return isinstance(declared, int) and not isinstance(declared, bool) and declared == computed
    return is_number(declared) and declared == computed


@dataclass(frozen=True)
class QuestionFacts:
    """
    Facts computed for a single question block.

    Attributes:
        problem_id: Identifier as rendered in messages ("?" if missing)
        points: Raw ``points`` value
        integer_points: False only when points is a fractional or
            non-finite number
        invalid_tags: Tags that fail ^[a-z0-9-]+$ or repeat an earlier tag
            (the whole value if ``tags`` is not a list)
        has_answer: ``answer`` is a non-blank string
    """
    problem_id: str
    points: Any
    integer_points: bool
    invalid_tags: tuple[Any, ...]
    has_answer: bool

    @property
    def tags_valid(self) -> bool:
        return not self.invalid_tags


@dataclass(frozen=True)
class InvariantReport:
    """
    Derived facts for a document compared against its metadata.

    Attributes:
        questions: Facts per question block, in document order
        question_count: Number of question blocks
        total_points: Sum of numeric points
        has_metadata: A metadata block was found
        declared_num_questions: Metadata ``num_questions`` (raw)
        declared_score_total: Metadata ``score_total`` (raw)
    """
    questions: tuple[QuestionFacts, ...]
    question_count: int
    total_points: int | float
    has_metadata: bool
    declared_num_questions: Any = None
    declared_score_total: Any = None

    @property
    def num_questions_matches(self) -> bool:
        return counter_matches(self.declared_num_questions, self.question_count)

    @property
    def score_total_matches(self) -> bool:
        return counter_matches(self.declared_score_total, self.total_points)

    @property
    def tags_valid(self) -> bool:
        return all(q.tags_valid for q in self.questions)

    @property
    def non_integer_points(self) -> list[QuestionFacts]:
        return [q for q in self.questions if not q.integer_points]

    @property
    def missing_answers(self) -> list[str]:
        return [q.problem_id for q in self.questions if not q.has_answer]

    @property
    def is_consistent(self) -> bool:
        """True when nothing needs normalizing and no guard would fail."""
        counters_ok = not self.has_metadata or self.question_count == 0 or (
            self.num_questions_matches and self.score_total_matches
        )
        return (
            counters_ok
            and self.tags_valid
            and not self.non_integer_points
            and not self.missing_answers
        )


def question_facts(block: ExamBlock) -> QuestionFacts:
    data = block.data
    points = data.get("points")
    tags = data.get("tags")
    if isinstance(tags, list) and tags:
        seen: set[str] = set()
        bad: list[Any] = []
        for tag in tags:
            # Repeats count as invalid too
            if not is_valid_tag(tag) or tag in seen:
                bad.append(tag)
            else:
                seen.add(tag)
        invalid = tuple(bad)
    elif isinstance(tags, list):
        invalid = ("<empty>",)
    else:
        invalid = (tags,)

    return QuestionFacts(
        problem_id=block.label,
        points=points,
        integer_points=not is_non_integer_points(points),
        invalid_tags=invalid,
        has_answer=has_answer(data),
    )


def check_invariants(document: ExamDocument) -> InvariantReport:
    """
    Compute facts for every question and compare them with the metadata.

    Args:
        document: Parsed exam.md document.

    Returns:
        InvariantReport. Nothing is raised here; see exam_md.guards for
        the fatal checks.
    """
    metadata = document.metadata.data if document.metadata is not None else {}
    return InvariantReport(
        questions=tuple(question_facts(block) for block in document.questions),
        question_count=document.question_count,
        total_points=compute_total_points(document.questions),
        has_metadata=document.metadata is not None,
        declared_num_questions=metadata.get("num_questions"),
        declared_score_total=metadata.get("score_total"),
    )
