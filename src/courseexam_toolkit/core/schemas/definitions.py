"""
JSON Schema definitions for exam.md blocks.

The schemas describe the CourseExam benchmark format: one metadata
object per exam and one object per (sub-)question. They are plain dicts
so validation never touches the filesystem.
"""

from __future__ import annotations

import re

# Tags: lowercase letters, digits, hyphens only. Use fullmatch(): "$" also
# matches before a trailing newline.
TAG_PATTERN = re.compile(r"^[a-z0-9-]+$")

# exam_id: slug such as "cs537_fall_2021_midterm"
EXAM_ID_PATTERN = re.compile(r"^[a-z0-9][a-z0-9_-]*$")

QUESTION_TYPES = ("ExactMatch", "Freeform")

EXAM_METADATA_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "CourseExam metadata block",
    "type": "object",
    "required": [
        "exam_id",
        "test_paper_name",
        "course",
        "institution",
        "year",
        "score_total",
        "num_questions",
    ],
    "properties": {
        "exam_id": {"type": "string", "pattern": EXAM_ID_PATTERN.pattern},
        "test_paper_name": {"type": "string", "minLength": 1},
        "course": {"type": "string", "minLength": 1},
        "institution": {"type": "string", "minLength": 1},
        "year": {"type": "integer"},
        "score_total": {"type": "integer", "minimum": 0},
        "num_questions": {"type": "integer", "minimum": 0},
    },
}

QUESTION_BLOCK_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "CourseExam question block",
    "type": "object",
    "required": ["problem_id", "points", "type", "tags", "answer"],
    "properties": {
        "problem_id": {"type": "string", "minLength": 1},
        "points": {"type": "integer", "exclusiveMinimum": 0},
        "type": {"enum": list(QUESTION_TYPES)},
        "tags": {
            "type": "array",
            "minItems": 1,
            "uniqueItems": True,
            "items": {"type": "string", "pattern": TAG_PATTERN.pattern},
        },
        "answer": {"type": "string", "pattern": r"\S"},
        "choices": {"type": "array", "items": {"type": "string"}},
        "llm_judge_instructions": {"type": "string"},
    },
    "allOf": [
        {
            "if": {"properties": {"type": {"const": "ExactMatch"}}},
            "then": {"required": ["choices"]},
        },
        {
            "if": {"properties": {"type": {"const": "Freeform"}}},
            "then": {"not": {"required": ["choices"]}},
        },
    ],
}
