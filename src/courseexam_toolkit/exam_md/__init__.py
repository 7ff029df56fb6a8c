"""
exam.md Validation Package

Parses the fenced JSON blocks of a CourseExam exam.md document, repairs
what can be repaired deterministically (tags, metadata counters) and
rejects what cannot (fractional points, missing answers).

Flow: parse -> check & normalize -> guard -> (document | error)
"""

from .checker import InvariantReport, QuestionFacts, check_invariants
from .config import ExamValidationConfig
from .errors import (
    ExamValidationError,
    GuardFailure,
    MissingAnswersError,
    NonIntegerPointsError,
)
from .guards import assert_integer_points, assert_non_empty_answers, run_guards
from .normalizer import (
    BlockRewrite,
    apply_rewrites,
    normalize_exam_markdown,
    normalize_tag,
    normalize_tags,
    plan_rewrites,
)
from .parser import parse_exam_markdown, scan_json_fences
from .pipeline import ValidationResult, finalize_exam_markdown, validate_exam_markdown

__all__ = [
    "InvariantReport",
    "QuestionFacts",
    "check_invariants",
    "ExamValidationConfig",
    "ExamValidationError",
    "GuardFailure",
    "MissingAnswersError",
    "NonIntegerPointsError",
    "assert_integer_points",
    "assert_non_empty_answers",
    "run_guards",
    "BlockRewrite",
    "apply_rewrites",
    "normalize_exam_markdown",
    "normalize_tag",
    "normalize_tags",
    "plan_rewrites",
    "parse_exam_markdown",
    "scan_json_fences",
    "ValidationResult",
    "finalize_exam_markdown",
    "validate_exam_markdown",
]
