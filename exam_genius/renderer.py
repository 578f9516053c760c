"""
HTML rendering of exam sheets with Jinja2.

The sheet markup sticks to tables and block boxes so the same template
renders in the browser and in PyMuPDF's HTML engine used for export.
"""

from functools import lru_cache
from importlib import resources

from jinja2 import Environment, PackageLoader, select_autoescape

from .layout import (
    QUESTION_TYPE_LABELS,
    SheetPage,
    paginate,
)
from .schema import DIFFICULTIES, ExamLabels, ExamPaper, ExamStyle, GenerationConfig, QuestionType

FONT_SIZES_PX = {"small": 13, "medium": 15, "large": 17}
DIFFICULTY_LABELS = {"Easy": "آسان", "Medium": "متوسط", "Hard": "دشوار"}
GRADE_COLUMNS = ("خیلی خوب", "خوب", "قابل قبول", "نیاز به تلاش")


@lru_cache()
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("exam_genius", "templates"),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.update(
        QuestionType=QuestionType,
        GRADE_COLUMNS=GRADE_COLUMNS,
        DIFFICULTIES=DIFFICULTIES,
        DIFFICULTY_LABELS=DIFFICULTY_LABELS,
        QUESTION_TYPE_LABELS=QUESTION_TYPE_LABELS,
    )
    return env


@lru_cache()
def sheet_css() -> str:
    """Stylesheet shared by the browser sheets and the PDF export."""
    return resources.files("exam_genius").joinpath("static/sheet.css").read_text(encoding="utf-8")


_CSS_UNSAFE = str.maketrans("", "", "<>{};\\")


def style_css(style: ExamStyle | None) -> str:
    """Inline overrides derived from the exam's style settings."""
    style = style or ExamStyle()
    return (
        ".sheet { font-family: %s; font-size: %dpx; }\n"
        ".question-text { text-align: %s; }\n"
        % (style.font_family.translate(_CSS_UNSAFE), FONT_SIZES_PX[style.font_size], style.text_align)
    )


def _context(exam: ExamPaper, editing: bool) -> dict:
    return {
        "exam": exam,
        "labels": exam.labels or ExamLabels(),
        "style_css": style_css(exam.style),
        "editing": editing,
    }


def render_sheet(exam: ExamPaper, sheet: SheetPage, editing: bool = False) -> str:
    """One sheet as an HTML fragment."""
    template = get_environment().get_template("_sheet.html")
    return template.render(sheet=sheet, **_context(exam, editing))


def render_sheet_document(exam: ExamPaper, sheet: SheetPage) -> str:
    """One sheet as a standalone HTML document (PDF export)."""
    template = get_environment().get_template("sheet_document.html")
    return template.render(sheet=sheet, **_context(exam, editing=False))


def render_exam_page(exam_id: str, exam: ExamPaper, editing: bool = False) -> str:
    """Editor/preview page with the toolbar and all sheets."""
    template = get_environment().get_template("exam.html")
    return template.render(
        exam_id=exam_id,
        sheets=paginate(exam),
        sheet_css=sheet_css(),
        **_context(exam, editing),
    )


def render_print_page(exam: ExamPaper) -> str:
    """All sheets, opening the browser print dialog on load."""
    template = get_environment().get_template("print.html")
    return template.render(sheets=paginate(exam), sheet_css=sheet_css(), **_context(exam, editing=False))


def render_index(config: GenerationConfig, max_total: int, max_upload_mb: int) -> str:
    template = get_environment().get_template("index.html")
    return template.render(
        config=config,
        max_total=max_total,
        max_upload_mb=max_upload_mb,
    )
