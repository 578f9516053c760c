"""Tests for HTML rendering of sheets."""

from exam_genius.layout import paginate
from exam_genius.renderer import (
    render_exam_page,
    render_index,
    render_print_page,
    render_sheet,
    style_css,
)
from exam_genius.schema import ExamStyle, GenerationConfig


class TestSheet:
    def test_first_sheet_has_full_header(self, sample_exam):
        html = render_sheet(sample_exam, paginate(sample_exam)[0])
        assert "دبستان نمونه" in html
        assert "بسمه تعالی" in html
        assert "2 صفحه" in html

    def test_later_sheets_use_compact_header(self, sample_exam):
        html = render_sheet(sample_exam, paginate(sample_exam)[1])
        assert "compact-header" in html
        assert "بسمه تعالی" not in html
        assert "2 از 2" in html

    def test_answer_areas_per_type(self, sample_exam):
        html = render_sheet(sample_exam, paginate(sample_exam)[0])
        assert "نهنگ" in html
        assert "فتوسنتز" in html
        assert "true-false" in html

    def test_footer_repeats_objectives(self, sample_exam):
        for sheet in paginate(sample_exam):
            html = render_sheet(sample_exam, sheet)
            assert "شناخت پستانداران" in html
            assert "حالت‌های ماده" not in html

    def test_editing_controls(self, sample_exam):
        sheet = paginate(sample_exam)[0]
        assert "data-action" not in render_sheet(sample_exam, sheet)
        html = render_sheet(sample_exam, sheet, editing=True)
        assert 'data-question-id="1"' in html
        assert 'data-action="regenerate"' in html
        assert 'data-option-index="3"' in html

    def test_question_text_is_escaped(self, sample_exam):
        exam = sample_exam.model_copy(deep=True)
        exam.questions[1].text = "<script>alert(1)</script>"
        html = render_sheet(exam, paginate(exam)[0])
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html


class TestPages:
    def test_exam_page_includes_every_sheet(self, sample_exam):
        html = render_exam_page("abc", sample_exam)
        assert html.count('class="sheet"') == 2
        assert 'data-exam-id="abc"' in html
        assert "/api/exams/abc/pdf" in html

    def test_print_page_opens_dialog(self, sample_exam):
        html = render_print_page(sample_exam)
        assert "window.print()" in html
        assert html.count('class="sheet"') == 2

    def test_index_form(self):
        html = render_index(GenerationConfig(), 40, 10)
        assert 'id="generation-form"' in html
        assert 'data-max-total="40"' in html
        assert 'data-type="MULTIPLE_CHOICE"' in html


class TestStyleCss:
    def test_defaults(self):
        css = style_css(None)
        assert "font-size: 15px" in css
        assert "text-align: justify" in css

    def test_font_family_sanitized(self):
        css = style_css(ExamStyle(font_family="Vazir; } body { display:none"))
        assert "}" not in css.split("font-family:")[1].split(";")[0]
        assert css.count("{") == 2
