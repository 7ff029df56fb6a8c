"""
Command line entry point.

Subcommands:
    validate      Normalize an exam.md and run the hard-fail guards
    extract-text  Print the text of a PDF/txt/md source document
    group-files   Turn a file grouping response into exam file groups (JSON)
    stage         Validate an exam.md and stage it into a job directory

Exit codes: 0 success, 1 validation/extraction failure (or, with
``validate --check``, a document that would be rewritten), 2 usage error.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from courseexam_toolkit import __version__
from courseexam_toolkit.core.schemas.validator import ValidationError
from courseexam_toolkit.exam_md.config import ExamValidationConfig
from courseexam_toolkit.exam_md.errors import ExamValidationError
from courseexam_toolkit.exam_md.pipeline import validate_exam_markdown
from courseexam_toolkit.publishing.file_groups import FileGroupingError, parse_file_grouping
from courseexam_toolkit.publishing.staging import stage_exam_job
from courseexam_toolkit.sources.text import (
    SourceExtractionError,
    UnsupportedFileTypeError,
    extract_text_from_file,
)

logger = logging.getLogger("courseexam_toolkit")


def _config_from_args(args: argparse.Namespace) -> ExamValidationConfig:
    return ExamValidationConfig(strict_schema=getattr(args, "strict", False))


def _cmd_validate(args: argparse.Namespace) -> int:
    source: Path = args.exam_md
    text = source.read_text(encoding="utf-8")

    try:
        result = validate_exam_markdown(text, config=_config_from_args(args))
    except (ExamValidationError, ValidationError) as e:
        logger.error(f"{source}: {e}")
        return 1

    for rewrite in result.rewrites:
        logger.info(f"  normalized {rewrite.label}: {rewrite.reason}")
    logger.info(
        f"{source}: {result.question_count} question(s), "
        f"{result.report.total_points} point(s), "
        f"{'normalized' if result.changed else 'unchanged'}"
    )

    if args.check:
        return 1 if result.changed else 0

    if args.in_place:
        if result.changed:
            source.write_text(result.text, encoding="utf-8")
    elif args.output is not None:
        args.output.write_text(result.text, encoding="utf-8")
    else:
        sys.stdout.write(result.text)
    return 0


def _cmd_extract_text(args: argparse.Namespace) -> int:
    try:
        text = extract_text_from_file(args.source)
    except (FileNotFoundError, UnsupportedFileTypeError, SourceExtractionError) as e:
        logger.error(str(e))
        return 1
    logger.info(f"{args.source.name}: {len(text):,} chars")
    sys.stdout.write(text)
    return 0


def _cmd_group_files(args: argparse.Namespace) -> int:
    response = args.response.read_text(encoding="utf-8")
    try:
        groups = parse_file_grouping(response)
    except FileGroupingError as e:
        logger.error(str(e))
        return 1

    for group in groups:
        kind = "combined" if group.is_combined else "separate solutions"
        logger.info(f"{group.inferred_name or group.exam_file}: {kind}, {len(group.file_names())} file(s)")
    payload = [dataclasses.asdict(group) for group in groups]
    sys.stdout.write(json.dumps(payload, indent=2, ensure_ascii=False) + "\n")
    return 0


def _cmd_stage(args: argparse.Namespace) -> int:
    text = args.exam_md.read_text(encoding="utf-8")
    try:
        job = stage_exam_job(
            args.job_dir,
            text,
            args.solutions,
            args.reference or [],
            exam_id=args.exam_id,
            pull_request_title=args.title,
            config=_config_from_args(args),
        )
    except (ExamValidationError, ValidationError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1

    logger.info(f"ID: {job.exam_id}")
    logger.info(f"Branch: {job.branch_name}")
    logger.info(f"Commit: {job.commit_title}")
    logger.info(f"Pull request: {job.pull_request_title}")
    logger.info(f"Data dir: {job.data_dir}")
    logger.info(f"Files: {', '.join(job.file_names)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="courseexam",
        description="Validate and stage CourseExam benchmark exam.md files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Normalize and check an exam.md")
    validate.add_argument("exam_md", type=Path, help="Path to exam.md")
    target = validate.add_mutually_exclusive_group()
    target.add_argument("--output", "-o", type=Path, help="Write the normalized document here")
    target.add_argument("--in-place", action="store_true", help="Rewrite exam.md in place")
    target.add_argument("--check", action="store_true",
                        help="Exit 1 if the document would be rewritten")
    validate.add_argument("--strict", action="store_true",
                          help="Also validate blocks against the exam format schema")
    validate.set_defaults(handler=_cmd_validate)

    extract = subparsers.add_parser("extract-text", help="Print text of a PDF/txt/md file")
    extract.add_argument("source", type=Path)
    extract.set_defaults(handler=_cmd_extract_text)

    group = subparsers.add_parser("group-files", help="Parse a file grouping response")
    group.add_argument("response", type=Path, help="Text file holding the model response")
    group.set_defaults(handler=_cmd_group_files)

    stage = subparsers.add_parser("stage", help="Validate and stage job inputs")
    stage.add_argument("exam_md", type=Path, help="Path to exam.md")
    stage.add_argument("--job-dir", type=Path, required=True)
    stage.add_argument("--solutions", type=Path, required=True)
    stage.add_argument("--reference", type=Path, action="append",
                       help="Reference file (repeatable)")
    stage.add_argument("--exam-id", type=str, default=None)
    stage.add_argument("--title", type=str, default=None,
                       help="Generated pull request title (validated, else derived from the id)")
    stage.add_argument("--strict", action="store_true")
    stage.set_defaults(handler=_cmd_stage)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    try:
        return args.handler(args)
    except OSError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
