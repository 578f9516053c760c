"""
Exam generation orchestrator.

Validate config → call the generation backend → apply page count →
structural validation → usage/cost accounting.
"""

import logging
import time

from .config import calculate_cost, get_settings
from .editor import replace_question, set_question_text
from .errors import MSG_EMPTY_CONTENT, MSG_NO_QUESTIONS, MSG_TOO_MANY_QUESTIONS, ConfigError
from .models.base import ExamClient
from .schema import Difficulty, ExamPaper, GenerationConfig, GenerationResult
from .store import ExamStore
from .validator import validate_exam

logger = logging.getLogger(__name__)

REGENERATING_TEXT = "در حال بازنویسی..."
CONTEXT_SUMMARY_CHARS = 500


def validate_config(config: GenerationConfig, max_total: int | None = None) -> None:
    """Reject configs the UI would refuse: no source, no questions, or too many."""
    if max_total is None:
        max_total = get_settings().MAX_TOTAL_QUESTIONS

    if config.source_type == "FILE":
        if config.file_data is None or not config.file_data.data:
            raise ConfigError(MSG_EMPTY_CONTENT)
    elif not config.content.strip():
        raise ConfigError(MSG_EMPTY_CONTENT)

    total = config.total_questions
    if total <= 0:
        raise ConfigError(MSG_NO_QUESTIONS)
    if total > max_total:
        raise ConfigError(MSG_TOO_MANY_QUESTIONS)


def context_summary(config: GenerationConfig | None, exam: ExamPaper) -> str:
    """Short topic hint for regeneration: start of the source text, else the exam title."""
    if config is not None and config.content.strip():
        return config.content[:CONTEXT_SUMMARY_CHARS]
    return exam.header.title


class ExamGenerator:
    """Runs generation and per-question regeneration against one backend."""

    def __init__(self, client: ExamClient | None = None):
        if client is None:
            from .models.gemini_client import GeminiExamClient

            client = GeminiExamClient()
        self.client = client

    def generate(self, config: GenerationConfig) -> GenerationResult:
        validate_config(config)

        start_time = time.time()
        self.client.reset_token_usage()

        exam = self.client.generate_exam(config)
        if config.page_count:
            exam = exam.model_copy(update={"page_count": max(1, config.page_count)})

        validation = validate_exam(exam, config)
        warnings = [issue.message for issue in validation.issues]
        for issue in validation.issues:
            logger.warning("Generated exam %s: %s", issue.level, issue.message)

        input_tokens, output_tokens = self.client.get_token_usage()
        elapsed = time.time() - start_time
        logger.info(
            "Generated %d questions with %s in %.2fs (%d in / %d out tokens)",
            len(exam.questions),
            self.client.model_name,
            elapsed,
            input_tokens,
            output_tokens,
        )

        return GenerationResult(
            model_name=self.client.model_name,
            exam=exam,
            total_tokens_input=input_tokens,
            total_tokens_output=output_tokens,
            total_cost_usd=calculate_cost(self.client.model_name, input_tokens, output_tokens),
            generation_time_seconds=elapsed,
            warnings=warnings,
        )

    def regenerate_question(
        self,
        store: ExamStore,
        exam_id: str,
        question_id: int,
        difficulty: Difficulty,
    ) -> ExamPaper:
        """Rewrite one stored question at a new difficulty.

        The stored question shows a placeholder while the call runs. On
        success the question is looked up again by id in the current exam
        and its content replaced, keeping the page it sits on now. On
        failure its text is restored and the error is re-raised. Edits to
        other questions made meanwhile are kept either way.
        """
        record = store.get(exam_id)
        question = record.exam.find_question(question_id)
        original_text = question.text
        summary = context_summary(record.config, record.exam)

        store.put(exam_id, set_question_text(record.exam, question_id, REGENERATING_TEXT))

        try:
            new_question = self.client.regenerate_question(question, difficulty, summary)
        except Exception:
            logger.exception("Regeneration of question %d failed, reverting", question_id)
            current = store.get(exam_id).exam
            try:
                store.put(exam_id, set_question_text(current, question_id, original_text))
            except KeyError:
                pass  # deleted while regenerating
            raise

        current = store.get(exam_id).exam
        try:
            latest = current.find_question(question_id)
        except KeyError:
            logger.info("Question %d was deleted during regeneration", question_id)
            return current
        current = replace_question(current, question_id, new_question.model_copy(update={"page": latest.page}))
        return store.put(exam_id, current).exam
