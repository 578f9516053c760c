"""
Pydantic models for exam papers and generation requests.
مدل‌های داده برگه آزمون و درخواست تولید.

JSON keys follow the camelCase names used by the browser UI
(``learningObjective``, ``questionCounts`` ...). Models accept both the
alias and the Python field name.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["Easy", "Medium", "Hard"]
SourceType = Literal["TEXT", "URL", "FILE"]
FontSize = Literal["small", "medium", "large"]
TextAlign = Literal["right", "center", "left", "justify"]

DIFFICULTIES: tuple[str, ...] = ("Easy", "Medium", "Hard")


class QuestionType(str, Enum):
    """The six fixed question kinds."""

    MULTIPLE_CHOICE = "MULTIPLE_CHOICE"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"
    LONG_ANSWER = "LONG_ANSWER"
    FILL_IN_THE_BLANK = "FILL_IN_THE_BLANK"
    MATCHING = "MATCHING"


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


def _normalize_difficulty(value):
    if isinstance(value, str):
        for d in DIFFICULTIES:
            if value.strip().lower() == d.lower():
                return d
        return None
    return value


class MatchingPair(_Model):
    """وصل کردنی: one left/right pair."""

    left: str = ""
    right: str = ""


class Question(_Model):
    """A single exam question."""

    id: int = 0
    type: QuestionType
    text: str = ""
    options: list[str] | None = Field(None, description="Multiple choice only")
    pairs: list[MatchingPair] | None = Field(None, description="Matching only")
    correct_answer: str | None = Field(None, alias="correctAnswer")
    learning_objective: str = Field("", alias="learningObjective")
    difficulty: Difficulty | None = None
    page: int | None = Field(None, description="Sheet the question is rendered on, starts at 1")

    @field_validator("difficulty", mode="before")
    @classmethod
    def _coerce_difficulty(cls, value):
        return _normalize_difficulty(value)

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value):
        if value is None:
            return None
        return max(1, int(value))

    @field_validator("learning_objective", "text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @model_validator(mode="after")
    def _drop_foreign_payload(self) -> "Question":
        if self.type != QuestionType.MULTIPLE_CHOICE:
            self.options = None
        if self.type != QuestionType.MATCHING:
            self.pairs = None
        return self

    @property
    def page_number(self) -> int:
        return self.page or 1


class ExamHeader(_Model):
    """سربرگ آزمون"""

    title: str = ""
    school_name: str = Field("", alias="schoolName")
    teacher_name: str | None = Field(None, alias="teacherName")
    grade: str = ""
    duration_minutes: int = Field(60, alias="durationMinutes")
    total_score: float | None = Field(None, alias="totalScore")

    @field_validator("title", "school_name", "grade", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else str(value)


class EvaluationTableItem(_Model):
    objective: str = ""


class ExamLabels(_Model):
    """Label overrides for the printed sheet."""

    school: str = "نام آموزشگاه"
    course: str = "نام درس"
    grade: str = "پایه/کلاس"
    name: str = "نام و نام خانوادگی"
    date: str = "تاریخ آزمون"
    time: str = "مدت آزمون"
    page: str = "صفحه"
    teacher_feedback: str = Field("نظر معلم", alias="teacherFeedback")
    parent_feedback: str = Field("نظر اولیا", alias="parentFeedback")
    signature: str = "امضاء"


class ExamStyle(_Model):
    font_family: str = Field("Vazirmatn, Tahoma, sans-serif", alias="fontFamily")
    font_size: FontSize = Field("medium", alias="fontSize")
    text_align: TextAlign = Field("justify", alias="textAlign")


class ExamPaper(_Model):
    """The generated exam: header, questions and evaluation table."""

    header: ExamHeader = Field(default_factory=ExamHeader)
    questions: list[Question] = Field(default_factory=list)
    evaluation_table: list[EvaluationTableItem] = Field(default_factory=list, alias="evaluationTable")
    page_count: int = Field(1, alias="pageCount")
    labels: ExamLabels | None = None
    style: ExamStyle | None = None

    @field_validator("page_count", mode="before")
    @classmethod
    def _clamp_page_count(cls, value):
        if value is None:
            return 1
        return max(1, int(value))

    @model_validator(mode="after")
    def _ensure_unique_ids(self) -> "ExamPaper":
        seen: set[int] = set()
        next_id = max((q.id for q in self.questions), default=0) + 1
        for q in self.questions:
            if q.id <= 0 or q.id in seen:
                q.id = next_id
                next_id += 1
            seen.add(q.id)
        return self

    def find_question(self, question_id: int) -> Question:
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)


DEFAULT_QUESTION_COUNTS: dict[QuestionType, int] = {
    QuestionType.MULTIPLE_CHOICE: 4,
    QuestionType.TRUE_FALSE: 3,
    QuestionType.FILL_IN_THE_BLANK: 3,
    QuestionType.MATCHING: 1,
    QuestionType.SHORT_ANSWER: 3,
    QuestionType.LONG_ANSWER: 1,
}


class FileData(_Model):
    """Uploaded source file, base64 encoded for inline submission."""

    mime_type: str = Field(alias="mimeType")
    data: str


class GenerationConfig(_Model):
    """User-specified source content, difficulty and per-type counts."""

    source_type: SourceType = Field("TEXT", alias="sourceType")
    content: str = ""
    file_data: FileData | None = Field(None, alias="fileData")
    difficulty: Difficulty = "Medium"
    question_counts: dict[QuestionType, int] = Field(
        default_factory=lambda: dict(DEFAULT_QUESTION_COUNTS), alias="questionCounts"
    )
    page_count: int | None = Field(None, alias="pageCount")

    @field_validator("question_counts", mode="after")
    @classmethod
    def _fill_counts(cls, counts: dict[QuestionType, int]) -> dict[QuestionType, int]:
        return {t: max(0, int(counts.get(t, 0))) for t in QuestionType}

    @property
    def total_questions(self) -> int:
        return sum(self.question_counts.values())


class GenerationResult(BaseModel):
    """نتیجه تولید و معیارهای مصرف"""

    model_name: str
    exam: ExamPaper
    total_tokens_input: int = 0
    total_tokens_output: int = 0
    total_cost_usd: float = 0.0
    generation_time_seconds: float = 0.0
    warnings: list[str] = Field(default_factory=list)
