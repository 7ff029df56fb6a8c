"""
Integration Tests for the exam.md Validation Pipeline

Covers the end-to-end scenarios: parse -> normalize -> guard.
"""

import pytest

from courseexam_toolkit.core.schemas.validator import ValidationError
from courseexam_toolkit.exam_md.config import ExamValidationConfig
from courseexam_toolkit.exam_md.errors import (
    GuardFailure,
    MissingAnswersError,
    NonIntegerPointsError,
)
from courseexam_toolkit.exam_md.parser import parse_exam_markdown
from courseexam_toolkit.exam_md.pipeline import (
    finalize_exam_markdown,
    validate_exam_markdown,
)


class TestValidateExamMarkdown:
    """Tests for validate_exam_markdown()."""

    def test_validate_when_fully_valid_then_identical_output(self, valid_exam_md):
        result = validate_exam_markdown(valid_exam_md)

        assert result.text is valid_exam_md
        assert result.changed is False
        assert result.rewrites == []
        assert result.question_count == 2
        assert validate_exam_markdown(result.text).text == valid_exam_md

    def test_validate_when_dirty_tag_then_normalized(self, exam_md_factory, metadata, questions):
        questions[0]["tags"] = ["OS_161/scheduling "]
        result = validate_exam_markdown(exam_md_factory(metadata, questions))

        assert result.changed
        assert parse_exam_markdown(result.text).questions[0].data["tags"] == ["os-161-scheduling"]

    def test_validate_when_stale_score_total_then_corrected(self, exam_md_factory, metadata, questions):
        metadata.update(score_total=100, num_questions=11)
        result = validate_exam_markdown(exam_md_factory(metadata, questions))

        meta = parse_exam_markdown(result.text).metadata.data
        assert (meta["score_total"], meta["num_questions"]) == (8, 2)
        assert result.report.declared_score_total == 100
        assert [r.reason for r in result.rewrites] == ["num_questions, score_total"]

    def test_validate_when_fractional_points_then_raises_naming_problem(self, exam_md_factory, metadata, questions):
        questions[0]["points"] = 2.5
        questions[0]["tags"] = ["Needs Cleaning"]
        with pytest.raises(NonIntegerPointsError, match=r"problem_id 1: 2\.5"):
            validate_exam_markdown(exam_md_factory(metadata, questions))

    def test_validate_when_empty_and_omitted_answers_then_single_error_lists_both(
        self, exam_md_factory, metadata, questions
    ):
        questions[0]["answer"] = ""
        del questions[1]["answer"]
        with pytest.raises(MissingAnswersError) as exc_info:
            validate_exam_markdown(exam_md_factory(metadata, questions))
        assert exc_info.value.problem_ids == ["1", "2"]

    def test_validate_when_both_fatal_conditions_then_every_id_named(self, exam_md_factory, metadata, questions):
        questions[1]["points"] = 1.5
        questions[0]["answer"] = " "
        with pytest.raises(GuardFailure) as exc_info:
            validate_exam_markdown(exam_md_factory(metadata, questions))

        message = str(exc_info.value)
        assert "problem_id 2: 1.5" in message
        assert "problem_id(s): 1" in message

    def test_validate_when_sub_parts_then_each_counted(self, exam_md_factory, metadata):
        parts = [
            {"problem_id": pid, "points": 2, "type": "Freeform", "tags": ["io"], "answer": "x",
             "llm_judge_instructions": "Award 2 points."}
            for pid in ("8a", "8b", "8c")
        ]
        result = validate_exam_markdown(exam_md_factory(metadata, parts))

        meta = parse_exam_markdown(result.text).metadata.data
        assert meta["num_questions"] == 3
        assert meta["score_total"] == 6

    def test_validate_when_run_on_output_then_unchanged(self, exam_md_factory, metadata, questions):
        metadata["score_total"] = "eight"
        questions[1]["tags"] = ["Scheduling", "SCHEDULING"]
        first = validate_exam_markdown(exam_md_factory(metadata, questions))
        second = validate_exam_markdown(first.text)

        assert first.changed
        assert second.changed is False
        assert second.text == first.text

    def test_validate_when_block_nested_too_deep_then_text_unchanged(self, valid_exam_md):
        text = valid_exam_md + "\n```json\n" + "[" * 200000 + "\n```\n"
        result = validate_exam_markdown(text)

        assert result.text is text
        assert result.question_count == 2

    def test_validate_when_points_overflow_to_infinity_then_raises(self, valid_exam_md):
        text = valid_exam_md.replace('"points": 3', '"points": 1e400')
        with pytest.raises(NonIntegerPointsError, match="problem_id 2: inf"):
            validate_exam_markdown(text)

    def test_validate_when_stray_fence_then_counters_kept(self, valid_exam_md):
        text = valid_exam_md.replace("## Question 2", "```\n\n## Question 2")
        result = validate_exam_markdown(text)

        assert result.text is text
        assert result.question_count == 2

    def test_validate_when_stray_fence_before_empty_answer_then_raises(self, exam_md_factory, metadata, questions):
        questions[1]["answer"] = ""
        text = exam_md_factory(metadata, questions).replace("## Question 2", "```\n\n## Question 2")
        with pytest.raises(MissingAnswersError) as exc_info:
            validate_exam_markdown(text)
        assert exc_info.value.problem_ids == ["2"]

    def test_validate_when_strict_and_valid_then_passes(self, valid_exam_md):
        config = ExamValidationConfig(strict_schema=True)
        assert validate_exam_markdown(valid_exam_md, config=config).text is valid_exam_md

    def test_validate_when_strict_and_freeform_has_choices_then_raises(self, exam_md_factory, metadata, questions):
        questions[0]["choices"] = ["a", "b"]
        config = ExamValidationConfig(strict_schema=True)
        with pytest.raises(ValidationError, match="not allowed on Freeform"):
            validate_exam_markdown(exam_md_factory(metadata, questions), config=config)

    def test_validate_when_not_strict_then_format_issues_tolerated(self, exam_md_factory, metadata, questions):
        questions[1]["type"] = "Essay"
        validate_exam_markdown(exam_md_factory(metadata, questions))


class TestFinalizeExamMarkdown:
    """Tests for finalize_exam_markdown()."""

    def test_finalize_when_valid_then_text(self, valid_exam_md):
        assert finalize_exam_markdown(valid_exam_md) == valid_exam_md

    def test_finalize_when_guard_fails_then_raises(self, exam_md_factory, metadata, questions):
        questions[0]["answer"] = None
        with pytest.raises(MissingAnswersError):
            finalize_exam_markdown(exam_md_factory(metadata, questions))
