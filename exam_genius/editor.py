"""
In-place editing operations on an exam paper.

Every function returns a new ExamPaper and leaves its input untouched.
Field names may be given as the JSON alias (``schoolName``) or the
Python name (``school_name``). Unknown question ids raise KeyError,
invalid values raise ValueError.
"""

from typing import Any, Literal

from pydantic import BaseModel

from .schema import (
    ExamHeader,
    ExamLabels,
    ExamPaper,
    ExamStyle,
    Question,
    QuestionType,
)

NEW_QUESTION_TEXT = "سوال جدید..."
NEW_QUESTION_OBJECTIVE = "هدف آموزشی جدید"
NEW_OPTION_TEXT = "گزینه جدید"

Direction = Literal["next", "prev"]


def _resolve_field(model_cls: type[BaseModel], field: str) -> str:
    for name, info in model_cls.model_fields.items():
        if field == name or field == info.alias:
            return name
    raise ValueError(f"Unknown field '{field}' for {model_cls.__name__}")


def _with_field(model: BaseModel, field: str, value: Any) -> BaseModel:
    """Copy ``model`` with one field changed, re-running validation."""
    model_cls = type(model)
    name = _resolve_field(model_cls, field)
    data = model.model_dump()
    data[name] = value
    return model_cls.model_validate(data)


def _replace(exam: ExamPaper, question_id: int, new_question: Question) -> ExamPaper:
    exam.find_question(question_id)
    questions = [new_question if q.id == question_id else q for q in exam.questions]
    return exam.model_copy(update={"questions": questions})


def update_header(exam: ExamPaper, field: str, value: Any) -> ExamPaper:
    header = _with_field(exam.header, field, value)
    return exam.model_copy(update={"header": header})


def update_labels(exam: ExamPaper, field: str, value: str) -> ExamPaper:
    labels = _with_field(exam.labels or ExamLabels(), field, value)
    return exam.model_copy(update={"labels": labels})


def update_style(exam: ExamPaper, field: str, value: str) -> ExamPaper:
    style = _with_field(exam.style or ExamStyle(), field, value)
    return exam.model_copy(update={"style": style})


def _check_page(value: Any) -> int:
    try:
        page = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Page must be a number, got {value!r}") from None
    if page < 1:
        raise ValueError("Page numbers start at 1")
    return page


def parse_edited_exam(data: dict[str, Any]) -> ExamPaper:
    """Validate a whole exam submitted by the editor.

    Unlike AI output, pages below 1 are an error here rather than clamped.
    """
    for question in data.get("questions") or []:
        if isinstance(question, dict) and question.get("page") is not None:
            _check_page(question["page"])
    return ExamPaper.model_validate(data)


def update_question(exam: ExamPaper, question_id: int, field: str, value: Any) -> ExamPaper:
    """Set a single field of one question."""
    question = exam.find_question(question_id)
    name = _resolve_field(Question, field)
    if name == "id":
        raise ValueError("Question id cannot be edited")
    if name == "page" and value is not None:
        value = _check_page(value)
    return _replace(exam, question_id, _with_field(question, name, value))


def set_question_text(exam: ExamPaper, question_id: int, text: str) -> ExamPaper:
    return update_question(exam, question_id, "text", text)


def replace_question(exam: ExamPaper, question_id: int, new_question: Question) -> ExamPaper:
    """Swap in a new question, keeping the old id."""
    return _replace(exam, question_id, new_question.model_copy(update={"id": question_id}))


def move_question_page(exam: ExamPaper, question_id: int, direction: Direction) -> ExamPaper:
    """Move a question one sheet forward or back.

    "prev" stops at page 1. Moving past the last sheet grows page_count.
    """
    if direction not in ("next", "prev"):
        raise ValueError(f"Unknown direction '{direction}'")
    question = exam.find_question(question_id)

    current = question.page_number
    new_page = current + 1 if direction == "next" else max(1, current - 1)
    page_count = max(exam.page_count or 1, new_page)

    moved = question.model_copy(update={"page": new_page})
    return _replace(exam, question_id, moved).model_copy(update={"page_count": page_count})


def delete_question(exam: ExamPaper, question_id: int) -> ExamPaper:
    exam.find_question(question_id)
    return exam.model_copy(update={"questions": [q for q in exam.questions if q.id != question_id]})


def next_question_id(exam: ExamPaper) -> int:
    return max((q.id for q in exam.questions), default=0) + 1


def add_question(exam: ExamPaper) -> ExamPaper:
    """Append a blank short-answer question."""
    question = Question(
        id=next_question_id(exam),
        type=QuestionType.SHORT_ANSWER,
        text=NEW_QUESTION_TEXT,
        learning_objective=NEW_QUESTION_OBJECTIVE,
        difficulty="Medium",
    )
    return exam.model_copy(update={"questions": [*exam.questions, question]})


def add_option(exam: ExamPaper, question_id: int) -> ExamPaper:
    """Append a placeholder option to a multiple-choice question."""
    question = exam.find_question(question_id)
    if question.type != QuestionType.MULTIPLE_CHOICE:
        raise ValueError("Only multiple choice questions have options")
    options = [*(question.options or []), NEW_OPTION_TEXT]
    return _replace(exam, question_id, question.model_copy(update={"options": options}))


def update_option(exam: ExamPaper, question_id: int, index: int, value: str) -> ExamPaper:
    question = exam.find_question(question_id)
    options = list(question.options or [])
    if not 0 <= index < len(options):
        raise ValueError(f"Option index {index} out of range")
    options[index] = value
    return _replace(exam, question_id, question.model_copy(update={"options": options}))
