"""
Module: blocks

Purpose:
    Immutable models for an exam.md document: the fenced JSON spans found
    in the text, the decoded metadata/question blocks, and the document
    that ties them back to the original string.

Key Classes:
    - SourceSpan: Character offset range into the document text
    - FencedJsonSpan: One ```json fenced region with its raw body
    - ExamBlock: A decoded metadata or question block
    - ExamDocument: The parsed document (text + blocks)

Dependencies:
    - dataclasses (std)
    - typing (std)

Used By:
    - exam_md.parser: Builds these models
    - exam_md.checker: Reads question/metadata blocks
    - exam_md.normalizer: Uses spans for targeted replacement
    - exam_md.guards: Scans question blocks

Invariants:
    Offsets are Python string indices (code points), so every span can be
    sliced straight out of the text it was parsed from. Blocks are values;
    the normalizer produces new text rather than mutating a block.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

BlockKind = Literal["metadata", "question"]


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """
    Half-open [start, end) range into a document string.

    Attributes:
        start: Offset of the first character
        end: Offset one past the last character

    Example:
        >>> span = SourceSpan(start=4, end=9)
        >>> span.slice("abc ```json")
        '```js'
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"end must be >= start, got {self.start}..{self.end}")

    @property
    def length(self) -> int:
        return self.end - self.start

    def slice(self, text: str) -> str:
        """Return the substring of ``text`` this span covers."""
        return text[self.start:self.end]

    def overlaps(self, other: SourceSpan) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True, slots=True)
class FencedJsonSpan:
    """
    A ```json fenced region located by the scanner.

    Attributes:
        span: Range from the opening fence through the closing ``` token
        raw: The fenced text exactly as it appears in the document
        body: The text between the fence lines (what gets decoded)
        newline: Line ending used by the opening fence line
    """

    span: SourceSpan
    raw: str
    body: str
    newline: str = "\n"

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end


@dataclass(frozen=True, slots=True)
class ExamBlock:
    """
    A decoded JSON object from a fenced span.

    The ``data`` mapping is the object as decoded; callers that want a
    modified copy must build a new dict (see exam_md.normalizer).

    Attributes:
        kind: "metadata" or "question"
        fence: The fenced span the object was decoded from
        data: Decoded JSON object, key order preserved
    """

    kind: BlockKind
    fence: FencedJsonSpan
    data: Mapping[str, Any]

    @property
    def span(self) -> SourceSpan:
        return self.fence.span

    @property
    def problem_id(self) -> Any:
        return self.data.get("problem_id")

    @property
    def label(self) -> str:
        """Human-readable identifier used in error messages."""
        if self.kind == "metadata":
            return str(self.data.get("exam_id", "metadata"))
        problem_id = self.data.get("problem_id")
        return "?" if problem_id is None else str(problem_id)


@dataclass(frozen=True)
class ExamDocument:
    """
    A parsed exam.md document.

    Attributes:
        text: The source string the offsets refer to
        fences: Every ```json span, decodable or not, in document order
        metadata: First decoded object without ``problem_id`` (if any)
        questions: Every decoded object with ``problem_id``, in document order
    """

    text: str
    fences: tuple[FencedJsonSpan, ...] = ()
    metadata: ExamBlock | None = None
    questions: tuple[ExamBlock, ...] = ()

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def blocks(self) -> tuple[ExamBlock, ...]:
        """Metadata and question blocks in document order."""
        found = list(self.questions)
        if self.metadata is not None:
            found.append(self.metadata)
        return tuple(sorted(found, key=lambda block: block.span.start))

    def question_ids(self) -> list[str]:
        return [block.label for block in self.questions]
