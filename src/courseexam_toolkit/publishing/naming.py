"""
Module: publishing.naming

Purpose:
    Derive the identifiers used when an exam is published: exam id,
    branch name, dataset directory, commit title and pull request title.
    All functions are pure; nothing here talks to git or GitHub.

Key Functions:
    - extract_exam_id(): exam_id from the metadata block
    - derive_branch_name(): exam id -> branch name
    - sanitize_exam_title(): Title safe for commit/PR text
    - build_pull_request_title_fallback(): Title from the exam id alone
    - clean_pull_request_title(): Accept a generated title or fall back
"""

from __future__ import annotations

import re
import time
from typing import Optional

from courseexam_toolkit.exam_md.parser import parse_exam_markdown

SEASONS = frozenset({"fall", "winter", "spring", "summer", "autumn"})
EXAM_TYPES = ("final", "midterm", "quiz", "exam")

PULL_REQUEST_TITLE_PATTERN = re.compile(
    r"^add [a-z0-9]+ [a-z]+ \d{4} (final|midterm|quiz|exam)$"
)

EXAM_DATA_ROOT = "benchmarks/courseexam_bench/data/raw"


def _metadata_field(exam_md: str, name: str) -> Optional[str]:
    document = parse_exam_markdown(exam_md)
    if document.metadata is None:
        return None
    value = document.metadata.data.get(name)
    if value is None or isinstance(value, (dict, list)):
        return None
    value = str(value).strip()
    return value or None


def extract_exam_id(
    exam_md: str,
    *,
    fallback: Optional[str] = None,
    now: Optional[float] = None,
) -> str:
    """
    Return the exam id for a document.

    Uses ``fallback`` (e.g. an id supplied by the contributor) first,
    then the metadata ``exam_id``, then ``exam_<unix seconds>``.
    """
    if fallback:
        return fallback
    exam_id = _metadata_field(exam_md, "exam_id")
    if exam_id:
        return exam_id
    stamp = int(now if now is not None else time.time())
    return f"exam_{stamp}"


def extract_exam_title(exam_md: str, exam_id: str) -> str:
    """``test_paper_name`` from the metadata, sanitized; the exam id otherwise."""
    return sanitize_exam_title(_metadata_field(exam_md, "test_paper_name") or exam_id)


def derive_branch_name(exam_id: str) -> str:
    """
    Example:
        >>> derive_branch_name("cs537_fall_2021_midterm")
        'cs537-fall-2021-midterm'
    """
    return exam_id.replace("_", "-")


def sanitize_exam_title(name: str) -> str:
    """Drop parentheses and turn double quotes into single quotes."""
    return re.sub(r"[()]", "", name).replace('"', "'")


def commit_title(exam_title: str) -> str:
    return f"add {exam_title}"


def exam_data_dir(exam_id: str) -> str:
    """Directory of the exam inside the benchmark repository."""
    return f"{EXAM_DATA_ROOT}/{exam_id}"


def build_pull_request_title_fallback(exam_id: str) -> str:
    """
    Build "add <course> <season> <year> <type>" from an exam id.

    The course is everything before the first season token, provided a
    4-digit year and at least one more token follow it. Ids that do not
    fit this shape become "add <id with spaces>".

    Example:
        >>> build_pull_request_title_fallback("cs537_fall_2021_midterm")
        'add cs537 fall 2021 midterm'
        >>> build_pull_request_title_fallback("comp3000_final")
        'add comp3000 final'
    """
    tokens = exam_id.lower().split("_")
    season_index = next((i for i, token in enumerate(tokens) if token in SEASONS), -1)

    if season_index > 0 and season_index + 2 < len(tokens):
        course = " ".join(tokens[:season_index])
        season = tokens[season_index]
        year = tokens[season_index + 1]
        exam_type = " ".join(tokens[season_index + 2:])
        if re.fullmatch(r"\d{4}", year) and exam_type:
            return re.sub(r"\s+", " ", f"add {course} {season} {year} {exam_type}")

    return re.sub(r"\s+", " ", f"add {exam_id.replace('_', ' ')}")


def is_valid_pull_request_title(title: str) -> bool:
    return PULL_REQUEST_TITLE_PATTERN.fullmatch(title) is not None


def clean_pull_request_title(raw_title: str, exam_id: str) -> str:
    """
    Accept a generated pull request title or fall back to the exam id.

    Only the first line is kept, lowercased. It must read
    "add <course> <season> <year> <final|midterm|quiz|exam>".
    """
    lines = raw_title.strip().split("\n")
    cleaned = lines[0].strip().lower() if lines else ""
    if not is_valid_pull_request_title(cleaned):
        return build_pull_request_title_fallback(exam_id)
    return cleaned
