"""
Generation backends.
"""

from .base import ExamClient
from .gemini_client import EXAM_RESPONSE_SCHEMA, GeminiExamClient

__all__ = [
    "ExamClient",
    "GeminiExamClient",
    "EXAM_RESPONSE_SCHEMA",
]
