"""
Module: exam_md.parser

Purpose:
    Locate fenced JSON blocks in an exam.md document and decode them into
    metadata/question blocks with their source offsets.

Key Functions:
    - scan_json_fences(): Line-based tokenizer for ```json fences
    - decode_block(): Decode one fence body, None if it is not a JSON object
    - parse_exam_markdown(): Build an ExamDocument from text

Dependencies:
    - json (std): Block decoding
    - courseexam_toolkit.core.models: Span/block/document models

Used By:
    - exam_md.checker, exam_md.normalizer, exam_md.guards

Fence grammar:
    A fence opener is a line starting at column 0 with three or more
    backticks. A line that is exactly "```json" opens a JSON block, which
    the next line that is exactly "```" closes. Any other opener ("```",
    "```python", "````markdown", ...) starts a prose code block that runs
    to the next line made only of at least as many backticks; nothing in a
    prose code block is scanned. Inline "```json" text is prose. A ```json
    fence that is never closed yields nothing.

    Two cases mark a prose opener as stray, i.e. plain text: a "```json"
    line inside a block opened by exactly three backticks (quoting one
    needs a longer fence such as "````"), and an opener that is never
    closed. Scanning then resumes on the line after the stray opener, so a
    lone "```" cannot hide the question blocks that follow it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator

from courseexam_toolkit.core.models.blocks import (
    ExamBlock,
    ExamDocument,
    FencedJsonSpan,
    SourceSpan,
)

logger = logging.getLogger(__name__)

FENCE_MARKER = "```"
JSON_FENCE_OPEN = "```json"
JSON_FENCE_CLOSE = "```"


def _iter_lines(text: str) -> Iterator[tuple[int, int, int]]:
    """Yield (line_start, content_end, next_line_start) for every line."""
    pos = 0
    length = len(text)
    while pos < length:
        newline_at = text.find("\n", pos)
        if newline_at == -1:
            yield pos, length, length
            return
        yield pos, newline_at, newline_at + 1
        pos = newline_at + 1


def _fence_run(token: str) -> int:
    """Number of leading backticks if ``token`` is a fence line, else 0."""
    run = len(token) - len(token.lstrip("`"))
    return run if run >= len(FENCE_MARKER) else 0


def scan_json_fences(text: str) -> list[FencedJsonSpan]:
    """
    Find every closed ```json fence in document order.

    Args:
        text: Full exam.md document.

    Returns:
        Spans ordered by start offset. Spans never overlap.

    Example:
        >>> spans = scan_json_fences('# T\\n```json\\n{"a": 1}\\n```\\n')
        >>> spans[0].body
        '{"a": 1}'
        >>> spans[0].start, spans[0].end
        (4, 24)
    """
    spans: list[FencedJsonSpan] = []
    lines = list(_iter_lines(text))

    json_open: tuple[int, int, str] | None = None  # (fence start, body start, newline)
    prose_open: tuple[int, int] | None = None  # (line index, backtick run)
    prev_content_end = 0
    index = 0

    while index < len(lines):
        line_start, content_end, next_start = lines[index]
        token = text[line_start:content_end].rstrip()

        if json_open is not None:
            if token == JSON_FENCE_CLOSE:
                fence_start, body_start, newline = json_open
                body_end = max(body_start, prev_content_end)
                body = text[body_start:body_end]
                if body.endswith("\r"):
                    body = body[:-1]
                end = line_start + len(JSON_FENCE_CLOSE)
                spans.append(
                    FencedJsonSpan(
                        span=SourceSpan(fence_start, end),
                        raw=text[fence_start:end],
                        body=body,
                        newline=newline,
                    )
                )
                json_open = None
        elif prose_open is not None:
            run = _fence_run(token)
            if run >= prose_open[1] and token == "`" * run:
                prose_open = None
            elif token == JSON_FENCE_OPEN and prose_open[1] == len(FENCE_MARKER):
                logger.debug(f"Stray code fence at offset {lines[prose_open[0]][0]} treated as text")
                prose_open = None
                continue
        elif token == JSON_FENCE_OPEN:
            if next_start > content_end:
                newline = "\r\n" if text.endswith("\r", line_start, content_end) else "\n"
                json_open = (line_start, next_start, newline)
        else:
            run = _fence_run(token)
            # Info strings of backtick fences never contain backticks
            if run and "`" not in token[run:]:
                prose_open = (index, run)

        prev_content_end = content_end
        index += 1

        if index == len(lines) and prose_open is not None:
            opener = prose_open[0]
            logger.debug(f"Unclosed code fence at offset {lines[opener][0]} treated as text")
            prev_content_end = lines[opener][1]
            index = opener + 1
            prose_open = None

    if json_open is not None:
        logger.debug(f"Unclosed json fence at offset {json_open[0]} ignored")
    return spans


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite JSON constant {name}")


def decode_block(fence: FencedJsonSpan) -> dict[str, Any] | None:
    """
    Decode a fence body as a JSON object.

    NaN/Infinity literals, malformed JSON, nesting too deep to decode
    and non-object values all return None; such blocks are left to other validation layers.
    """
    try:
        value = json.loads(fence.body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Skipping undecodable json block at offset {fence.start}: {e}")
        return None
    if not isinstance(value, dict):
        logger.debug(f"Skipping non-object json block at offset {fence.start}")
        return None
    return value


def parse_exam_markdown(text: str) -> ExamDocument:
    """
    Parse an exam.md document.

    The first decodable object without a ``problem_id`` key is the
    metadata block; every decodable object with ``problem_id`` is a
    question block, wherever it appears. Other objects are ignored.

    Args:
        text: Full exam.md document.

    Returns:
        ExamDocument referencing ``text``.
    """
    fences = scan_json_fences(text)
    metadata: ExamBlock | None = None
    questions: list[ExamBlock] = []

    for fence in fences:
        data = decode_block(fence)
        if data is None:
            continue
        if "problem_id" in data:
            questions.append(ExamBlock(kind="question", fence=fence, data=data))
        elif metadata is None:
            metadata = ExamBlock(kind="metadata", fence=fence, data=data)

    return ExamDocument(
        text=text,
        fences=tuple(fences),
        metadata=metadata,
        questions=tuple(questions),
    )
