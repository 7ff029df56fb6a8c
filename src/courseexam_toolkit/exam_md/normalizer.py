"""
Module: exam_md.normalizer

Purpose:
    Deterministically rewrite an exam.md document so that question tags
    are clean and the metadata counters match the questions. Only the
    JSON blocks that change are re-serialized; every other character of
    the document is copied through untouched.

Key Functions:
    - normalize_tag(): Clean one tag string
    - normalize_tags(): Clean a tag list (dedupe, "misc" fallback)
    - plan_rewrites(): Work out which blocks change and their new text
    - apply_rewrites(): Splice replacements into the text, rightmost first
    - normalize_exam_markdown(): Parse, plan and apply in one call

Key Classes:
    - BlockRewrite: One planned replacement

Used By:
    - exam_md.pipeline
    - cli

Normalization is idempotent: normalizing its own output returns that
output unchanged, and a document that needs nothing is returned as the
very same string object.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from courseexam_toolkit.core.models.blocks import ExamBlock, ExamDocument, SourceSpan

from .checker import compute_total_points, counter_matches
from .config import DEFAULT_CONFIG, ExamValidationConfig
from .parser import JSON_FENCE_CLOSE, JSON_FENCE_OPEN, parse_exam_markdown

logger = logging.getLogger(__name__)

_SEPARATOR_RUN = re.compile(r"[\s_/]+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-+")


def normalize_tag(tag: str) -> str:
    """
    Clean a single tag.

    Steps, in order: lowercase; whitespace/underscore/slash runs to one
    hyphen; drop characters outside [a-z0-9-]; collapse hyphen runs; trim
    hyphens at both ends. May return "".

    Example:
        >>> normalize_tag("OS_161/scheduling ")
        'os-161-scheduling'
    """
    cleaned = tag.lower()
    cleaned = _SEPARATOR_RUN.sub("-", cleaned)
    cleaned = _DISALLOWED.sub("", cleaned)
    cleaned = _HYPHEN_RUN.sub("-", cleaned)
    return cleaned.strip("-")


def normalize_tags(raw_tags: Any, *, fallback: str = DEFAULT_CONFIG.fallback_tag) -> list[str]:
    """
    Clean a question's tag list.

    Non-list values and non-string entries are discarded. Empty results
    are dropped, duplicates removed keeping first-seen order, and an
    empty list becomes ``[fallback]``.

    Example:
        >>> normalize_tags(["Virtual Memory", "virtual_memory", "!!"])
        ['virtual-memory']
        >>> normalize_tags(None)
        ['misc']
    """
    if not isinstance(raw_tags, list):
        return [fallback]

    normalized: list[str] = []
    for tag in raw_tags:
        if not isinstance(tag, str):
            continue
        cleaned = normalize_tag(tag)
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)

    return normalized or [fallback]


@dataclass(frozen=True)
class BlockRewrite:
    """
    A planned replacement of one fenced block.

    Attributes:
        span: Range of the original fenced block
        text: Replacement fenced block, fences included
        label: Block identifier for logging
        reason: Short description of what changed
    """
    span: SourceSpan
    text: str
    label: str
    reason: str


def render_json_block(data: Mapping[str, Any], *, newline: str = "\n", indent: int = 2) -> str:
    """Serialize ``data`` inside ```json fences using ``newline`` line endings."""
    body = json.dumps(data, indent=indent, ensure_ascii=False)
    if newline != "\n":
        body = body.replace("\n", newline)
    return f"{JSON_FENCE_OPEN}{newline}{body}{newline}{JSON_FENCE_CLOSE}"


def _rewrite(block: ExamBlock, data: dict[str, Any], reason: str, config: ExamValidationConfig) -> BlockRewrite:
    return BlockRewrite(
        span=block.span,
        text=render_json_block(data, newline=block.fence.newline, indent=config.json_indent),
        label=block.label,
        reason=reason,
    )


def plan_rewrites(
    document: ExamDocument,
    config: ExamValidationConfig | None = None,
) -> list[BlockRewrite]:
    """
    Decide which blocks need rewriting and render their new text.

    Question blocks are rewritten when their cleaned tags differ from the
    stored value. The metadata block is rewritten when ``num_questions``
    or ``score_total`` is not the int computed from the questions; an
    exam with no question blocks keeps its metadata as is.

    Args:
        document: Parsed document.
        config: Fallback tag and JSON indentation.

    Returns:
        Rewrites in document order.
    """
    config = config or DEFAULT_CONFIG
    rewrites: list[BlockRewrite] = []

    for block in document.questions:
        tags = normalize_tags(block.data.get("tags"), fallback=config.fallback_tag)
        if tags != block.data.get("tags"):
            data = dict(block.data)
            data["tags"] = tags
            rewrites.append(_rewrite(block, data, "tags", config))

    metadata = document.metadata
    if metadata is not None and document.question_count > 0:
        question_count = document.question_count
        total_points = compute_total_points(document.questions)
        data = dict(metadata.data)
        changed: list[str] = []

        if not counter_matches(data.get("num_questions"), question_count):
            data["num_questions"] = question_count
            changed.append("num_questions")
        if not counter_matches(data.get("score_total"), total_points):
            data["score_total"] = total_points
            changed.append("score_total")

        if changed:
            rewrites.append(_rewrite(metadata, data, ", ".join(changed), config))

    rewrites.sort(key=lambda r: r.span.start)
    return rewrites


def apply_rewrites(text: str, rewrites: Iterable[BlockRewrite]) -> str:
    """
    Splice rewrites into ``text``.

    Replacements are applied rightmost first so that every span still
    refers to the original offsets when it is used.

    Raises:
        ValueError: If two rewrites overlap.
    """
    ordered = sorted(rewrites, key=lambda r: r.span.start, reverse=True)
    for right, left in zip(ordered, ordered[1:]):
        if left.span.overlaps(right.span):
            raise ValueError(f"Overlapping rewrites for {left.label} and {right.label}")

    updated = text
    for rewrite in ordered:
        updated = updated[:rewrite.span.start] + rewrite.text + updated[rewrite.span.end:]
    return updated


def normalize_exam_markdown(text: str, config: ExamValidationConfig | None = None) -> str:
    """
    Normalize tags and metadata counters of an exam.md document.

    Args:
        text: exam.md content.
        config: Optional validation config.

    Returns:
        The normalized document, or ``text`` itself when nothing changed.

    Example:
        >>> doc = '```json\\n{"exam_id": "x", "score_total": 1, "num_questions": 1}\\n```'
        >>> normalize_exam_markdown(doc) is doc
        True
    """
    document = parse_exam_markdown(text)
    rewrites = plan_rewrites(document, config)
    if not rewrites:
        return text

    for rewrite in rewrites:
        logger.debug(f"Rewriting block {rewrite.label} ({rewrite.reason})")
    return apply_rewrites(text, rewrites)
