"""
Module: publishing.staging

Purpose:
    Stage a validated exam for the publishing job: the exam.md plus the
    solution and reference files are written into ``<job_dir>/input``,
    which the job runner mounts. Only documents that pass the guards are
    staged.

Key Functions:
    - stage_exam_job(): Validate and write the job inputs

Key Classes:
    - StagedJob: What was written and where

Dependencies:
    - exam_md.pipeline: Normalization and guards
    - publishing.file_locking: Locked exam.md write
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from courseexam_toolkit.exam_md.config import ExamValidationConfig
from courseexam_toolkit.exam_md.pipeline import validate_exam_markdown

from .file_locking import locked_write_text
from .naming import (
    build_pull_request_title_fallback,
    clean_pull_request_title,
    commit_title,
    derive_branch_name,
    exam_data_dir,
    extract_exam_id,
    extract_exam_title,
)

logger = logging.getLogger(__name__)

EXAM_FILE_NAME = "exam.md"
INPUT_DIR_NAME = "input"


@dataclass
class StagedJob:
    """
    Result of staging one exam.

    Attributes:
        input_dir: Directory holding the staged files
        exam_id: Exam id taken from the metadata (or supplied)
        branch_name: Branch the job will push to
        exam_title: Sanitized test_paper_name
        commit_title: Commit message title ("add <exam_title>")
        pull_request_title: Cleaned generated title, or one built from the id
        data_dir: Directory of the exam in the benchmark repository
        file_names: Staged file names, exam.md first
    """
    input_dir: Path
    exam_id: str
    branch_name: str
    exam_title: str
    commit_title: str
    pull_request_title: str
    data_dir: str
    file_names: List[str] = field(default_factory=list)


def _copy_into(source: Path, input_dir: Path, staged: List[str]) -> None:
    if not source.is_file():
        raise FileNotFoundError(f"File to stage not found: {source}")
    if source.name in staged:
        logger.debug(f"Skipping {source.name}: already staged")
        return
    shutil.copyfile(source, input_dir / source.name)
    staged.append(source.name)


def stage_exam_job(
    job_dir: Path,
    exam_md: str,
    solutions: Path,
    references: Sequence[Path] = (),
    *,
    exam_id: Optional[str] = None,
    pull_request_title: Optional[str] = None,
    config: Optional[ExamValidationConfig] = None,
) -> StagedJob:
    """
    Validate ``exam_md`` and stage it with its source files.

    Args:
        job_dir: Job directory (``input/`` is created inside it).
        exam_md: exam.md content; normalized before it is written.
        solutions: Solutions file to copy alongside.
        references: Extra reference files to copy.
        exam_id: Overrides the metadata exam_id.
        pull_request_title: Generated title to clean; falls back to one
            built from the exam id when missing or malformed.
        config: Validation config.

    Returns:
        StagedJob describing the staged files.

    Raises:
        ExamValidationError: If the document fails a guard. Nothing is
            written in that case.
        FileNotFoundError: If a file to copy does not exist.
    """
    final_md = validate_exam_markdown(exam_md, config=config).text

    final_id = extract_exam_id(final_md, fallback=exam_id)
    input_dir = job_dir / INPUT_DIR_NAME
    input_dir.mkdir(parents=True, exist_ok=True)

    locked_write_text(input_dir / EXAM_FILE_NAME, final_md)
    staged = [EXAM_FILE_NAME]

    _copy_into(solutions, input_dir, staged)
    for reference in references:
        _copy_into(reference, input_dir, staged)

    if pull_request_title:
        pr_title = clean_pull_request_title(pull_request_title, final_id)
    else:
        pr_title = build_pull_request_title_fallback(final_id)
    exam_title = extract_exam_title(final_md, final_id)

    logger.info(f"Staged {final_id}: {', '.join(staged)}")
    return StagedJob(
        input_dir=input_dir,
        exam_id=final_id,
        branch_name=derive_branch_name(final_id),
        exam_title=exam_title,
        commit_title=commit_title(exam_title),
        pull_request_title=pr_title,
        data_dir=exam_data_dir(final_id),
        file_names=staged,
    )
