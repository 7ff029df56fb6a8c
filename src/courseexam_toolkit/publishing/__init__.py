"""
Publishing Package

Pure helpers used around a validated exam: identifiers and titles for
the branch/commit/pull request, parsing of file grouping responses, and
staging of job inputs. Git, Docker and GitHub calls live outside this
package.
"""

from .file_groups import ExamFileGroup, FileGroupingError, parse_file_grouping
from .naming import (
    build_pull_request_title_fallback,
    clean_pull_request_title,
    commit_title,
    derive_branch_name,
    exam_data_dir,
    extract_exam_id,
    sanitize_exam_title,
)
from .staging import StagedJob, stage_exam_job

__all__ = [
    "ExamFileGroup",
    "FileGroupingError",
    "parse_file_grouping",
    "build_pull_request_title_fallback",
    "clean_pull_request_title",
    "commit_title",
    "derive_branch_name",
    "exam_data_dir",
    "extract_exam_id",
    "sanitize_exam_title",
    "StagedJob",
    "stage_exam_job",
]
