"""
Grouping of uploaded exam/solution files.

A batch upload is grouped into exams by a language model that answers
with a JSON object of the form::

    {"exams": [{"exam_file": "F18-midterm.pdf",
                "solutions_file": "F18-midterm-sol.pdf",
                "reference_files": [],
                "inferred_name": "Fall 2018 Midterm"}]}

This module turns that answer into typed records. Combined question and
answer documents use the same file for both roles.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, List

logger = logging.getLogger(__name__)

_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

SOLUTION_MARKERS = ("sol", "soln", "solution", "answers")


class FileGroupingError(ValueError):
    """Raised when a grouping response cannot be turned into exam groups."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


@dataclass(frozen=True)
class ExamFileGroup:
    """One exam and the files that belong to it."""
    exam_file: str
    solutions_file: str
    reference_files: List[str] = field(default_factory=list)
    inferred_name: str = ""

    @property
    def is_combined(self) -> bool:
        """Questions and answers come from the same document."""
        return self.exam_file == self.solutions_file

    def file_names(self) -> List[str]:
        names = [self.exam_file]
        if not self.is_combined:
            names.append(self.solutions_file)
        names.extend(self.reference_files)
        return names


def looks_like_solution_file(file_name: str) -> bool:
    """
    Whether a file name carries a solutions marker ("-sol", "_answers", ...).

    Example:
        >>> looks_like_solution_file("comp3000-final-2014F-sol.pdf")
        True
        >>> looks_like_solution_file("F18-midterm.pdf")
        False
    """
    stem = file_name.rsplit(".", 1)[0].lower()
    words = re.split(r"[^a-z0-9]+", stem)
    return any(word in SOLUTION_MARKERS for word in words)


def _group_from_payload(entry: Any, index: int, raw: str) -> ExamFileGroup:
    if not isinstance(entry, dict):
        raise FileGroupingError(f"exams[{index}] must be an object", raw=raw)

    exam_file = entry.get("exam_file")
    solutions_file = entry.get("solutions_file") or exam_file
    if not isinstance(exam_file, str) or not exam_file:
        raise FileGroupingError(f"exams[{index}] is missing exam_file", raw=raw)
    if not isinstance(solutions_file, str):
        raise FileGroupingError(f"exams[{index}] has an invalid solutions_file", raw=raw)

    references = entry.get("reference_files") or []
    if not isinstance(references, list) or not all(isinstance(r, str) for r in references):
        raise FileGroupingError(f"exams[{index}] has invalid reference_files", raw=raw)

    return ExamFileGroup(
        exam_file=exam_file,
        solutions_file=solutions_file,
        reference_files=list(references),
        inferred_name=str(entry.get("inferred_name") or ""),
    )


def parse_file_grouping(response: str) -> List[ExamFileGroup]:
    """
    Parse a grouping response into ExamFileGroup records.

    Any prose around the JSON object is ignored; the span from the first
    "{" to the last "}" is decoded.

    Raises:
        FileGroupingError: No object found, invalid JSON, or a malformed
            ``exams`` list.
    """
    match = _OBJECT_PATTERN.search(response)
    if match is None:
        raise FileGroupingError("No JSON found in response", raw=response)

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise FileGroupingError(f"Failed to parse grouping response: {e}", raw=response) from e

    exams = payload.get("exams") if isinstance(payload, dict) else None
    if not isinstance(exams, list):
        raise FileGroupingError("Grouping response has no 'exams' list", raw=response)

    groups = [_group_from_payload(entry, i, response) for i, entry in enumerate(exams)]
    logger.debug(f"Parsed {len(groups)} exam group(s)")
    return groups
