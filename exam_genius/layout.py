"""
Sheet layout: groups questions by page, then by type.

Rendered page count = max(exam.page_count, highest page used by a
question). Pages with no questions are still produced so the editor
can move questions onto them. Display numbers run across pages in
rendered order.
"""

from collections import defaultdict

from pydantic import BaseModel, Field

from .schema import ExamPaper, Question, QuestionType

TYPE_ORDER: tuple[QuestionType, ...] = (
    QuestionType.TRUE_FALSE,
    QuestionType.MATCHING,
    QuestionType.MULTIPLE_CHOICE,
    QuestionType.FILL_IN_THE_BLANK,
    QuestionType.SHORT_ANSWER,
    QuestionType.LONG_ANSWER,
)

SECTION_TITLES: dict[QuestionType, str] = {
    QuestionType.TRUE_FALSE: "سوالات صحیح و غلط",
    QuestionType.MATCHING: "سوالات وصل کردنی",
    QuestionType.MULTIPLE_CHOICE: "سوالات چهار گزینه‌ای",
    QuestionType.FILL_IN_THE_BLANK: "جاهای خالی را با کلمات مناسب پر کنید",
    QuestionType.SHORT_ANSWER: "سوالات پاسخ کوتاه",
    QuestionType.LONG_ANSWER: "سوالات تشریحی",
}

QUESTION_TYPE_LABELS: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "چهار گزینه‌ای",
    QuestionType.TRUE_FALSE: "صحیح / غلط",
    QuestionType.FILL_IN_THE_BLANK: "جای خالی",
    QuestionType.MATCHING: "وصل کردنی",
    QuestionType.SHORT_ANSWER: "پاسخ کوتاه",
    QuestionType.LONG_ANSWER: "تشریحی",
}

# Footer table shows at most this many objectives per sheet
EVALUATION_ROWS_PER_PAGE = 3
EVALUATION_PLACEHOLDER = "." * 60


class NumberedQuestion(BaseModel):
    number: int
    question: Question


class SheetSection(BaseModel):
    type: QuestionType
    title: str
    items: list[NumberedQuestion]


class EvaluationRow(BaseModel):
    index: int
    objective: str
    placeholder: bool = False


class SheetPage(BaseModel):
    """One printed sheet."""

    number: int
    total_pages: int
    sections: list[SheetSection] = Field(default_factory=list)
    evaluation_rows: list[EvaluationRow] = Field(default_factory=list)

    @property
    def is_first(self) -> bool:
        return self.number == 1

    @property
    def is_empty(self) -> bool:
        return not self.sections

    @property
    def question_count(self) -> int:
        return sum(len(s.items) for s in self.sections)


def group_by_page(questions: list[Question]) -> dict[int, list[Question]]:
    """Bucket questions by page number (missing page → 1), keeping order."""
    pages: dict[int, list[Question]] = defaultdict(list)
    for q in questions:
        pages[q.page_number].append(q)
    return dict(pages)


def total_render_pages(exam: ExamPaper) -> int:
    max_used = max((q.page_number for q in exam.questions), default=0)
    return max(exam.page_count or 1, max_used)


def evaluation_rows(exam: ExamPaper) -> list[EvaluationRow]:
    if not exam.evaluation_table:
        return [
            EvaluationRow(index=i, objective=EVALUATION_PLACEHOLDER, placeholder=True)
            for i in range(1, EVALUATION_ROWS_PER_PAGE + 1)
        ]
    return [
        EvaluationRow(index=i, objective=item.objective)
        for i, item in enumerate(exam.evaluation_table[:EVALUATION_ROWS_PER_PAGE], start=1)
    ]


def paginate(exam: ExamPaper) -> list[SheetPage]:
    """Lay the exam out as sheets: page → type (fixed order) → original order."""
    by_page = group_by_page(exam.questions)
    total = total_render_pages(exam)
    rows = evaluation_rows(exam)

    sheets: list[SheetPage] = []
    number = 0
    for page_num in range(1, total + 1):
        by_type: dict[QuestionType, list[Question]] = defaultdict(list)
        for q in by_page.get(page_num, []):
            by_type[q.type].append(q)

        sections = []
        for qtype in TYPE_ORDER:
            if not by_type.get(qtype):
                continue
            items = []
            for q in by_type[qtype]:
                number += 1
                items.append(NumberedQuestion(number=number, question=q))
            sections.append(SheetSection(type=qtype, title=SECTION_TITLES[qtype], items=items))

        sheets.append(
            SheetPage(
                number=page_num,
                total_pages=total,
                sections=sections,
                evaluation_rows=rows,
            )
        )

    return sheets
