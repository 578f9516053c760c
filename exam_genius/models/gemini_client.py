"""
Gemini client for exam generation using the google-genai SDK.

Three source modes:
  TEXT → plain text prompt, schema-constrained JSON
  FILE → inline image/PDF part, schema-constrained JSON
  URL  → URL-context tool; the API rejects tools combined with a
         response schema, so the structure lives in the prompt and the
         reply is parsed permissively.
"""

import base64
import logging

from ..config import get_settings
from ..errors import MSG_API_KEY_MISSING, MSG_REGENERATION_FAILED, GenerationError
from ..prompt import (
    get_file_prompt,
    get_regeneration_prompt,
    get_system_prompt,
    get_text_prompt,
    get_url_prompt,
)
from ..schema import Difficulty, ExamPaper, GenerationConfig, Question, QuestionType
from ._utils import parse_json_safe, retry_llm_call
from .base import ExamClient

logger = logging.getLogger(__name__)

# Mirrors ExamPaper / Question (camelCase keys) in Gemini's schema dialect
EXAM_RESPONSE_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "header": {
            "type": "OBJECT",
            "properties": {
                "title": {"type": "STRING"},
                "schoolName": {"type": "STRING"},
                "teacherName": {"type": "STRING"},
                "grade": {"type": "STRING"},
                "durationMinutes": {"type": "INTEGER"},
                "totalScore": {"type": "NUMBER"},
            },
            "required": ["title", "totalScore"],
        },
        "questions": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "INTEGER"},
                    "type": {"type": "STRING", "enum": [t.value for t in QuestionType]},
                    "text": {"type": "STRING"},
                    "options": {"type": "ARRAY", "items": {"type": "STRING"}},
                    "pairs": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "left": {"type": "STRING"},
                                "right": {"type": "STRING"},
                            },
                        },
                    },
                    "correctAnswer": {"type": "STRING"},
                    "learningObjective": {"type": "STRING"},
                    "difficulty": {"type": "STRING"},
                },
                "required": ["id", "type", "text"],
            },
        },
        "evaluationTable": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"objective": {"type": "STRING"}},
            },
        },
    },
}


class GeminiExamClient(ExamClient):
    """Exam generation backend backed by Gemini."""

    def __init__(self, model_name: str | None = None, temperature: float | None = None):
        settings = get_settings()
        super().__init__(model_name=model_name or settings.GEMINI_MODEL)
        self.temperature = settings.GENERATION_TEMPERATURE if temperature is None else temperature
        self._client = None  # lazy init

    def _get_client(self):
        if self._client is None:
            from google import genai

            settings = get_settings()
            if not settings.GOOGLE_API_KEY:
                raise GenerationError(MSG_API_KEY_MISSING)
            self._client = genai.Client(api_key=settings.GOOGLE_API_KEY)
        return self._client

    def build_request(self, config: GenerationConfig) -> tuple[list, dict]:
        """Return (contents, config kwargs) for a generation call."""
        request: dict = {
            "system_instruction": get_system_prompt(config),
            "temperature": self.temperature,
        }

        if config.source_type == "URL":
            request["tools"] = [{"url_context": {}}]
            return [get_url_prompt(config)], request

        request["response_mime_type"] = "application/json"
        request["response_schema"] = EXAM_RESPONSE_SCHEMA

        if config.source_type == "FILE":
            if config.file_data is None:
                raise ValueError("FILE source requires file data")
            from google.genai import types

            part = types.Part.from_bytes(
                data=base64.b64decode(config.file_data.data),
                mime_type=config.file_data.mime_type,
            )
            return [part, get_file_prompt(config)], request

        return [get_text_prompt(config)], request

    @retry_llm_call()
    def _generate_content(self, contents: list, request: dict) -> str:
        from google.genai import types

        response = self._get_client().models.generate_content(
            model=self.model_name,
            contents=contents,
            config=types.GenerateContentConfig(**request),
        )

        if getattr(response, "usage_metadata", None):
            self._add_tokens(
                getattr(response.usage_metadata, "prompt_token_count", 0),
                getattr(response.usage_metadata, "candidates_token_count", 0),
            )

        if not response.text:
            if response.candidates:
                reason = getattr(response.candidates[0], "finish_reason", "unknown")
            else:
                reason = "no candidates"
            raise ValueError(f"No response generated. Finish reason: {reason}")

        return response.text

    def generate_exam(self, config: GenerationConfig) -> ExamPaper:
        try:
            contents, request = self.build_request(config)
            text = self._generate_content(contents, request)
            return ExamPaper.model_validate(parse_json_safe(text))
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("Generation error: %s", exc)
            raise GenerationError() from exc

    def regenerate_question(
        self,
        question: Question,
        difficulty: Difficulty,
        context_summary: str,
    ) -> Question:
        prompt = get_regeneration_prompt(question, difficulty, context_summary)
        try:
            text = self._generate_content([prompt], {"response_mime_type": "application/json"})
            data = parse_json_safe(text)
            if not isinstance(data, dict):
                raise ValueError("Regeneration response is not a JSON object")
            return merge_regenerated(question, data, difficulty)
        except GenerationError:
            raise
        except Exception as exc:
            logger.error("Regeneration error for question %d: %s", question.id, exc)
            raise GenerationError(MSG_REGENERATION_FAILED) from exc


def merge_regenerated(question: Question, data: dict, difficulty: Difficulty) -> Question:
    """Overlay the model's fields on the old question; id and page are kept."""
    merged = question.model_dump(by_alias=True)
    merged.update(data)
    merged["id"] = question.id
    merged["page"] = question.page
    merged["difficulty"] = difficulty
    return Question.model_validate(merged)
