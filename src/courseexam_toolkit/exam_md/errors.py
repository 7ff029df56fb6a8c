"""Errors raised by the exam.md hard-fail guards."""

from __future__ import annotations

from typing import Any, Sequence


class ExamValidationError(ValueError):
    """Base class for fatal exam.md validation errors.

    Attributes:
        problem_ids: Identifiers of the questions implicated.
    """

    def __init__(self, message: str, problem_ids: Sequence[str] = ()):
        super().__init__(message)
        self.problem_ids = list(problem_ids)


class NonIntegerPointsError(ExamValidationError):
    """A question declares fractional points."""

    def __init__(self, problem_id: str, points: Any):
        super().__init__(
            f"Non-integer points for problem_id {problem_id}: {points}",
            problem_ids=[problem_id],
        )
        self.problem_id = problem_id
        self.points = points


class MissingAnswersError(ExamValidationError):
    """One or more questions have a missing, non-string or blank answer."""

    def __init__(self, problem_ids: Sequence[str]):
        super().__init__(
            f"Missing or empty answers for problem_id(s): {', '.join(problem_ids)}",
            problem_ids=problem_ids,
        )


class GuardFailure(ExamValidationError):
    """Several guards failed on the same document."""

    def __init__(self, failures: Sequence[ExamValidationError]):
        ids: list[str] = []
        for failure in failures:
            ids.extend(pid for pid in failure.problem_ids if pid not in ids)
        super().__init__("; ".join(str(f) for f in failures), problem_ids=ids)
        self.failures = list(failures)
