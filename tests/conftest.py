import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

# Add src to sys.path so we can import courseexam_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


def _fenced(data: Dict[str, Any]) -> str:
    return "```json\n" + json.dumps(data, indent=2, ensure_ascii=False) + "\n```"


def build_exam_md(
    metadata: Optional[Dict[str, Any]],
    questions: List[Dict[str, Any]],
    *,
    title: str = "CS 537 Fall 2021 Midterm",
) -> str:
    """Render an exam.md in the benchmark layout."""
    parts = [f"# {title}", ""]
    if metadata is not None:
        parts += [_fenced(metadata), ""]
    for number, question in enumerate(questions, start=1):
        parts += [
            "---",
            "",
            f"## Question {question.get('problem_id', number)} [{question.get('points')} point(s)]",
            "",
            f"Question text number {number}.",
            "",
            _fenced(question),
            "",
        ]
    return "\n".join(parts)


# Common test fixtures
@pytest.fixture
def exam_md_factory() -> Callable[..., str]:
    """Return the exam.md builder."""
    return build_exam_md


@pytest.fixture
def metadata() -> Dict[str, Any]:
    return {
        "exam_id": "cs537_fall_2021_midterm",
        "test_paper_name": "CS 537 Fall 2021 Midterm",
        "course": "CS 537",
        "institution": "University of Wisconsin-Madison",
        "year": 2021,
        "score_total": 8,
        "num_questions": 2,
    }


@pytest.fixture
def questions() -> List[Dict[str, Any]]:
    return [
        {
            "problem_id": "1",
            "points": 5,
            "type": "Freeform",
            "tags": ["virtual-memory"],
            "answer": "Translation Lookaside Buffer",
            "llm_judge_instructions": "Award 5 points for expanding the acronym correctly.",
        },
        {
            "problem_id": "2",
            "points": 3,
            "type": "ExactMatch",
            "tags": ["scheduling"],
            "choices": ["Running", "Ready", "Blocked"],
            "answer": "C",
        },
    ]


@pytest.fixture
def valid_exam_md(metadata, questions) -> str:
    """A fully valid exam.md: integer points, matching totals, clean tags."""
    return build_exam_md(metadata, questions)
