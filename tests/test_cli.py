"""
Tests for the courseexam command line.
"""

import json
import logging

import pytest

from courseexam_toolkit import __version__
from courseexam_toolkit.cli import main


@pytest.fixture
def exam_file(tmp_path, valid_exam_md):
    path = tmp_path / "exam.md"
    path.write_text(valid_exam_md, encoding="utf-8")
    return path


@pytest.fixture
def dirty_exam_file(tmp_path, exam_md_factory, metadata, questions):
    metadata["num_questions"] = 9
    path = tmp_path / "dirty.md"
    path.write_text(exam_md_factory(metadata, questions), encoding="utf-8")
    return path


class TestValidateCommand:
    """Tests for `courseexam validate`."""

    def test_validate_when_valid_then_prints_document(self, exam_file, valid_exam_md, capsys):
        assert main(["validate", str(exam_file)]) == 0
        assert capsys.readouterr().out == valid_exam_md

    def test_validate_when_check_and_clean_then_zero(self, exam_file):
        assert main(["validate", str(exam_file), "--check"]) == 0

    def test_validate_when_check_and_dirty_then_one(self, dirty_exam_file):
        before = dirty_exam_file.read_text(encoding="utf-8")
        assert main(["validate", str(dirty_exam_file), "--check"]) == 1
        assert dirty_exam_file.read_text(encoding="utf-8") == before

    def test_validate_when_in_place_then_file_rewritten(self, dirty_exam_file):
        assert main(["validate", str(dirty_exam_file), "--in-place"]) == 0
        assert '"num_questions": 2' in dirty_exam_file.read_text(encoding="utf-8")

    def test_validate_when_output_then_written_there(self, dirty_exam_file, tmp_path):
        out = tmp_path / "fixed.md"
        assert main(["validate", str(dirty_exam_file), "-o", str(out)]) == 0
        assert '"num_questions": 2' in out.read_text(encoding="utf-8")

    def test_validate_when_guard_fails_then_one_and_error_logged(
        self, tmp_path, exam_md_factory, metadata, questions, caplog
    ):
        questions[0]["points"] = 2.5
        path = tmp_path / "exam.md"
        path.write_text(exam_md_factory(metadata, questions), encoding="utf-8")

        assert main(["validate", str(path)]) == 1
        assert "Non-integer points for problem_id 1: 2.5" in caplog.text

    def test_validate_when_strict_and_bad_type_then_one(self, tmp_path, exam_md_factory, metadata, questions):
        questions[1]["type"] = "Essay"
        path = tmp_path / "exam.md"
        path.write_text(exam_md_factory(metadata, questions), encoding="utf-8")

        assert main(["validate", str(path)]) == 0
        assert main(["validate", str(path), "--strict"]) == 1

    def test_validate_when_file_missing_then_one(self, tmp_path):
        assert main(["validate", str(tmp_path / "missing.md")]) == 1

    def test_validate_when_summary_then_logged(self, dirty_exam_file, caplog):
        caplog.set_level(logging.INFO)
        main(["validate", str(dirty_exam_file), "--check"])

        assert "normalized cs537_fall_2021_midterm: num_questions" in caplog.text
        assert "2 question(s), 8 point(s), normalized" in caplog.text


class TestOtherCommands:
    """Tests for `extract-text`, `group-files`, `stage` and global options."""

    def test_extract_text_when_markdown_then_printed(self, tmp_path, capsys):
        path = tmp_path / "solutions.md"
        path.write_text("Answer: C", encoding="utf-8")

        assert main(["extract-text", str(path)]) == 0
        assert capsys.readouterr().out == "Answer: C"

    def test_extract_text_when_unsupported_then_one(self, tmp_path):
        path = tmp_path / "exam.docx"
        path.write_bytes(b"PK")
        assert main(["extract-text", str(path)]) == 1

    def test_stage_when_valid_then_job_written(self, tmp_path, exam_file):
        solutions = tmp_path / "sol.txt"
        solutions.write_text("answers", encoding="utf-8")
        job_dir = tmp_path / "job"

        code = main(["stage", str(exam_file), "--job-dir", str(job_dir), "--solutions", str(solutions)])

        assert code == 0
        assert sorted(p.name for p in (job_dir / "input").iterdir()) == ["exam.md", "sol.txt"]

    def test_stage_when_title_given_then_publishing_names_logged(self, tmp_path, exam_file, caplog):
        caplog.set_level(logging.INFO)
        solutions = tmp_path / "sol.txt"
        solutions.write_text("answers", encoding="utf-8")

        code = main([
            "stage", str(exam_file),
            "--job-dir", str(tmp_path / "job"),
            "--solutions", str(solutions),
            "--title", "add cs537 fall 2021 midterm",
        ])

        assert code == 0
        assert "Commit: add CS 537 Fall 2021 Midterm" in caplog.text
        assert "Pull request: add cs537 fall 2021 midterm" in caplog.text
        assert "Data dir: benchmarks/courseexam_bench/data/raw/cs537_fall_2021_midterm" in caplog.text

    def test_group_files_when_response_valid_then_groups_printed(self, tmp_path, capsys):
        response = tmp_path / "response.txt"
        response.write_text(
            'Grouping:\n{"exams": [{"exam_file": "F18-midterm.pdf", "solutions_file": "F18-midterm-sol.pdf"}]}',
            encoding="utf-8",
        )

        assert main(["group-files", str(response)]) == 0
        groups = json.loads(capsys.readouterr().out)
        assert groups == [{
            "exam_file": "F18-midterm.pdf",
            "solutions_file": "F18-midterm-sol.pdf",
            "reference_files": [],
            "inferred_name": "",
        }]

    def test_group_files_when_no_json_then_one(self, tmp_path):
        response = tmp_path / "response.txt"
        response.write_text("Sorry, I cannot group these.", encoding="utf-8")

        assert main(["group-files", str(response)]) == 1

    def test_stage_when_solutions_missing_then_one(self, tmp_path, exam_file):
        code = main([
            "stage", str(exam_file),
            "--job-dir", str(tmp_path / "job"),
            "--solutions", str(tmp_path / "missing.pdf"),
        ])
        assert code == 1

    def test_version_when_requested_then_printed(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_no_command_then_usage_error(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
