"""
Structural validation of generated exam papers.

Checks shape only (ids, pages, type payloads, requested counts); it does
not judge whether the questions are pedagogically sound.
"""

from collections import Counter
from typing import Literal

from pydantic import BaseModel, Field

from .schema import ExamPaper, GenerationConfig, QuestionType


class ValidationIssue(BaseModel):
    """Single validation issue found in an exam."""

    level: Literal["error", "warning"]
    question_id: int | None = None
    message: str


class ValidationResult(BaseModel):
    is_valid: bool
    total_errors: int = 0
    total_warnings: int = 0
    issues: list[ValidationIssue] = Field(default_factory=list)


def validate_exam(exam: ExamPaper, config: GenerationConfig | None = None) -> ValidationResult:
    """
    Validate an exam for structural completeness.

    Args:
        exam: The exam to validate
        config: Optional generation config; when given, per-type counts are
            compared with what was requested

    Returns:
        ValidationResult with all issues found
    """
    issues: list[ValidationIssue] = []

    _validate_header(exam, issues)
    _validate_questions(exam, issues)
    if config is not None:
        _validate_counts(exam, config, issues)

    errors = sum(1 for i in issues if i.level == "error")
    warnings = sum(1 for i in issues if i.level == "warning")

    return ValidationResult(
        is_valid=errors == 0,
        total_errors=errors,
        total_warnings=warnings,
        issues=issues,
    )


def _validate_header(exam: ExamPaper, issues: list[ValidationIssue]):
    if not exam.header.title.strip():
        issues.append(ValidationIssue(level="warning", message="Exam title is empty"))
    if not exam.evaluation_table:
        issues.append(ValidationIssue(level="warning", message="Evaluation table is empty"))


def _validate_questions(exam: ExamPaper, issues: list[ValidationIssue]):
    if not exam.questions:
        issues.append(ValidationIssue(level="error", message="Exam has no questions"))
        return

    id_counts = Counter(q.id for q in exam.questions)
    for qid, n in id_counts.items():
        if n > 1:
            issues.append(
                ValidationIssue(level="error", question_id=qid, message=f"Question id used {n} times")
            )

    for q in exam.questions:
        if not q.text.strip():
            issues.append(ValidationIssue(level="error", question_id=q.id, message="Question text is empty"))
        if q.page is not None and q.page < 1:
            issues.append(ValidationIssue(level="error", question_id=q.id, message=f"Invalid page {q.page}"))
        if q.type == QuestionType.MULTIPLE_CHOICE and len(q.options or []) < 2:
            issues.append(
                ValidationIssue(
                    level="warning",
                    question_id=q.id,
                    message=f"Multiple choice question has {len(q.options or [])} options",
                )
            )
        if q.type == QuestionType.MATCHING and not q.pairs:
            issues.append(
                ValidationIssue(level="warning", question_id=q.id, message="Matching question has no pairs")
            )


def _validate_counts(exam: ExamPaper, config: GenerationConfig, issues: list[ValidationIssue]):
    actual = Counter(q.type for q in exam.questions)
    for qtype, requested in config.question_counts.items():
        got = actual.get(qtype, 0)
        if got != requested:
            issues.append(
                ValidationIssue(
                    level="warning",
                    message=f"Requested {requested} {qtype.value} questions, got {got}",
                )
            )
