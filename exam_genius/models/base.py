"""
Base class for exam generation clients.
"""

from abc import ABC, abstractmethod

from ..schema import Difficulty, ExamPaper, GenerationConfig, Question


class ExamClient(ABC):
    """Base class for all generation backends"""

    def __init__(self, model_name: str):
        """
        Initialize the client.

        Args:
            model_name: Name of the model to use
        """
        self.model_name = model_name
        self.input_tokens = 0
        self.output_tokens = 0

    @abstractmethod
    def generate_exam(self, config: GenerationConfig) -> ExamPaper:
        """
        Generate a complete exam from the source described by ``config``.

        Returns:
            ExamPaper object
        """

    @abstractmethod
    def regenerate_question(
        self,
        question: Question,
        difficulty: Difficulty,
        context_summary: str,
    ) -> Question:
        """
        Rewrite a single question at a new difficulty.

        The returned question keeps the original id.
        """

    def _add_tokens(self, input_t, output_t):
        """Accumulate token counts, treating None as 0."""
        self.input_tokens += input_t or 0
        self.output_tokens += output_t or 0

    def get_token_usage(self) -> tuple[int, int]:
        return (self.input_tokens, self.output_tokens)

    def reset_token_usage(self) -> None:
        self.input_tokens = 0
        self.output_tokens = 0
