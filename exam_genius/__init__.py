"""
Exam Genius - generate printable Persian exam sheets with Gemini.
"""

__version__ = "1.0.0"

from .config import get_settings
from .generator import ExamGenerator, validate_config
from .layout import paginate
from .schema import ExamPaper, GenerationConfig, GenerationResult, Question, QuestionType

__all__ = [
    "ExamGenerator",
    "ExamPaper",
    "GenerationConfig",
    "GenerationResult",
    "Question",
    "QuestionType",
    "get_settings",
    "paginate",
    "validate_config",
]
