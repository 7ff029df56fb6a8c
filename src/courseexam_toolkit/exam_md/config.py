"""
Module: exam_md.config

Purpose:
    Configuration dataclass for the exam.md validation pipeline.

Key Classes:
    - ExamValidationConfig: Normalization and strictness settings

Used By:
    - exam_md.normalizer: Fallback tag and JSON indentation
    - exam_md.pipeline: Strict schema switch
    - cli: Maps command line flags onto the config
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExamValidationConfig:
    """
    Configuration for exam.md validation.

    Attributes:
        fallback_tag: Tag used when a question's tags clean down to nothing
            (default "misc").
        json_indent: Indentation for re-serialized JSON blocks (default 2).
        strict_schema: Also validate every block against the exam format
            schema after the guards pass (default False).
    """
    fallback_tag: str = "misc"
    json_indent: int = 2
    strict_schema: bool = False

    def __post_init__(self) -> None:
        if not self.fallback_tag:
            raise ValueError("fallback_tag must be non-empty")
        if self.json_indent < 0:
            raise ValueError(f"json_indent must be >= 0, got {self.json_indent}")


DEFAULT_CONFIG = ExamValidationConfig()
