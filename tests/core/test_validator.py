"""
Unit Tests for Exam Block Validation

Tests for basic and strict (jsonschema) validation of exam.md blocks.
"""

import logging

import pytest

from courseexam_toolkit.core.schemas.validator import (
    ValidationError,
    validate_document_blocks,
    validate_exam_metadata,
    validate_question_block,
)
from courseexam_toolkit.exam_md.parser import parse_exam_markdown


class TestValidateExamMetadata:
    """Tests for validate_exam_metadata function."""

    def test_valid_metadata(self, metadata):
        validate_exam_metadata(metadata)
        validate_exam_metadata(metadata, strict=True)

    def test_rejects_non_slug_exam_id(self, metadata):
        metadata["exam_id"] = "CS 537 Final"
        with pytest.raises(ValidationError, match="exam_id") as exc_info:
            validate_exam_metadata(metadata)
        assert exc_info.value.path == "metadata"

    def test_rejects_exam_id_with_trailing_newline(self, metadata):
        metadata["exam_id"] = "cs537_final\n"
        with pytest.raises(ValidationError, match="exam_id"):
            validate_exam_metadata(metadata)

    def test_rejects_string_year(self, metadata):
        metadata["year"] = "2021"
        with pytest.raises(ValidationError, match="year"):
            validate_exam_metadata(metadata)

    def test_reports_every_problem(self, metadata):
        del metadata["course"]
        metadata["num_questions"] = 2.5
        with pytest.raises(ValidationError) as exc_info:
            validate_exam_metadata(metadata)
        assert len(exc_info.value.errors) == 2


class TestValidateQuestionBlock:
    """Tests for validate_question_block function."""

    def test_valid_freeform(self, questions):
        validate_question_block(questions[0], strict=True)

    def test_valid_exact_match(self, questions):
        validate_question_block(questions[1], strict=True)

    def test_rejects_exact_match_without_choices(self, questions):
        del questions[1]["choices"]
        with pytest.raises(ValidationError, match="ExactMatch questions need"):
            validate_question_block(questions[1])

    def test_rejects_freeform_with_choices(self, questions):
        questions[0]["choices"] = []
        with pytest.raises(ValidationError, match="not allowed on Freeform"):
            validate_question_block(questions[0])

    @pytest.mark.parametrize("points", [0, -2, 1.5, "3", True])
    def test_rejects_non_positive_or_non_integer_points(self, questions, points):
        questions[0]["points"] = points
        with pytest.raises(ValidationError, match="points"):
            validate_question_block(questions[0])

    def test_rejects_unknown_type(self, questions):
        questions[0]["type"] = "Essay"
        with pytest.raises(ValidationError, match="type"):
            validate_question_block(questions[0])

    def test_rejects_invalid_and_duplicate_tags(self, questions):
        questions[0]["tags"] = ["Bad Tag", "ok", "ok"]
        with pytest.raises(ValidationError) as exc_info:
            validate_question_block(questions[0])
        assert any("invalid tag" in e for e in exc_info.value.errors)
        assert any("duplicate" in e for e in exc_info.value.errors)

    def test_rejects_tag_with_trailing_newline(self, questions):
        questions[0]["tags"] = ["virtual-memory\n"]
        with pytest.raises(ValidationError, match="invalid tag"):
            validate_question_block(questions[0])

    def test_rejects_blank_answer(self, questions):
        questions[1]["answer"] = "  "
        with pytest.raises(ValidationError, match="answer"):
            validate_question_block(questions[1])

    def test_warns_freeform_without_judge_instructions(self, questions, caplog):
        del questions[0]["llm_judge_instructions"]
        with caplog.at_level(logging.WARNING):
            validate_question_block(questions[0])
        assert "llm_judge_instructions" in caplog.text

    def test_strict_rejects_non_string_choice(self, questions):
        questions[1]["choices"] = ["Running", 2]
        with pytest.raises(ValidationError):
            validate_question_block(questions[1], strict=True)


class TestValidateDocumentBlocks:
    """Tests for validate_document_blocks function."""

    def test_valid_document(self, valid_exam_md):
        validate_document_blocks(parse_exam_markdown(valid_exam_md), strict=True)

    def test_missing_metadata_reported(self, exam_md_factory, questions):
        with pytest.raises(ValidationError, match="no metadata block"):
            validate_document_blocks(parse_exam_markdown(exam_md_factory(None, questions)))

    def test_problems_prefixed_with_block(self, exam_md_factory, metadata, questions):
        questions[0]["type"] = "Essay"
        questions[1]["answer"] = ""
        with pytest.raises(ValidationError) as exc_info:
            validate_document_blocks(parse_exam_markdown(exam_md_factory(metadata, questions)))

        errors = exc_info.value.errors
        assert any(e.startswith("question 1: type") for e in errors)
        assert any(e.startswith("question 2: answer") for e in errors)
