"""
CourseExam Core Package

Shared models and exam-format schema checks used by the exam.md
validation pipeline and the publishing helpers.
"""

from .models import ExamBlock, ExamDocument, FencedJsonSpan, SourceSpan
from .schemas import ValidationError

__all__ = [
    "ExamBlock",
    "ExamDocument",
    "FencedJsonSpan",
    "SourceSpan",
    "ValidationError",
]
