"""Pytest configuration and fixtures for exam_genius tests."""

import pytest

from exam_genius.config import get_settings
from exam_genius.errors import GenerationError
from exam_genius.models.base import ExamClient
from exam_genius.schema import ExamPaper, GenerationConfig


class FakeExamClient(ExamClient):
    """Generation backend that returns canned exams instead of calling Gemini."""

    def __init__(self, exam: ExamPaper | None = None):
        super().__init__(model_name="fake-model")
        self.exam = exam
        self.generate_calls: list[GenerationConfig] = []
        self.regenerate_calls: list[tuple] = []
        self.generate_error: Exception | None = None
        self.regenerate_error: Exception | None = None
        # called while a regeneration is "in flight"
        self.during_regeneration = None

    def generate_exam(self, config):
        self.generate_calls.append(config)
        self._add_tokens(1200, 800)
        if self.generate_error is not None:
            raise self.generate_error
        return self.exam.model_copy(deep=True)

    def regenerate_question(self, question, difficulty, context_summary):
        self.regenerate_calls.append((question, difficulty, context_summary))
        if self.during_regeneration is not None:
            self.during_regeneration()
        if self.regenerate_error is not None:
            raise self.regenerate_error
        return question.model_copy(update={"text": f"سوال بازنویسی شده ({difficulty})", "difficulty": difficulty})


def make_exam() -> ExamPaper:
    return ExamPaper.model_validate(
        {
            "header": {
                "title": "علوم تجربی",
                "schoolName": "دبستان نمونه",
                "grade": "ششم",
                "durationMinutes": 45,
                "totalScore": 20,
            },
            "questions": [
                {
                    "id": 1,
                    "type": "MULTIPLE_CHOICE",
                    "text": "کدام گزینه یک پستاندار است؟",
                    "options": ["نهنگ", "کوسه", "قورباغه", "مار"],
                    "correctAnswer": "نهنگ",
                    "learningObjective": "شناخت پستانداران",
                    "difficulty": "Medium",
                },
                {"id": 2, "type": "TRUE_FALSE", "text": "آب در صفر درجه یخ می‌زند.", "difficulty": "Easy"},
                {
                    "id": 3,
                    "type": "MATCHING",
                    "text": "موارد مرتبط را به هم وصل کنید.",
                    "pairs": [{"left": "ریشه", "right": "جذب آب"}, {"left": "برگ", "right": "فتوسنتز"}],
                },
                {"id": 4, "type": "SHORT_ANSWER", "text": "فتوسنتز را تعریف کنید.", "page": 2},
                {"id": 5, "type": "LONG_ANSWER", "text": "چرخه آب را توضیح دهید.", "page": 2},
                {"id": 6, "type": "FILL_IN_THE_BLANK", "text": "گیاهان با ...... غذا می‌سازند."},
            ],
            "evaluationTable": [
                {"objective": "شناخت پستانداران"},
                {"objective": "درک فتوسنتز"},
                {"objective": "چرخه آب"},
                {"objective": "حالت‌های ماده"},
            ],
            "pageCount": 2,
        }
    )


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep settings away from the user's home directory and real environment."""
    monkeypatch.setenv("EXAM_GENIUS_SETTINGS_FILE", str(tmp_path / "settings.json"))
    monkeypatch.delenv("MAX_TOTAL_QUESTIONS", raising=False)
    monkeypatch.delenv("MAX_UPLOAD_MB", raising=False)
    monkeypatch.delenv("PDF_FONT_DIR", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_exam():
    return make_exam()


@pytest.fixture
def text_config():
    return GenerationConfig(
        source_type="TEXT",
        content="فتوسنتز فرایندی است که گیاهان با کمک نور خورشید غذا می‌سازند.",
        question_counts={
            "MULTIPLE_CHOICE": 1,
            "TRUE_FALSE": 1,
            "MATCHING": 1,
            "SHORT_ANSWER": 1,
            "LONG_ANSWER": 1,
            "FILL_IN_THE_BLANK": 1,
        },
    )


@pytest.fixture
def fake_client(sample_exam):
    return FakeExamClient(sample_exam)


@pytest.fixture
def failing_client(sample_exam):
    client = FakeExamClient(sample_exam)
    client.regenerate_error = GenerationError("بازنویسی سوال ناموفق بود.")
    return client
