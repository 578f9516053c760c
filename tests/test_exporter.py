"""Tests for PDF export."""

import fitz
import pytest

from exam_genius.exporter import PDFExporter, pdf_page_count
from exam_genius.schema import ExamPaper


@pytest.fixture
def exporter():
    return PDFExporter()


def test_one_page_per_sheet(exporter, sample_exam):
    data = exporter.export(sample_exam)
    assert data.startswith(b"%PDF")
    assert pdf_page_count(data) == 2


def test_empty_sheets_still_exported(exporter, sample_exam):
    exam = sample_exam.model_copy(update={"page_count": 4})
    assert pdf_page_count(exporter.export(exam)) == 4


def test_pages_are_a4(exporter):
    data = exporter.export(ExamPaper.model_validate({"header": {"title": "آزمون"}}))
    with fitz.open(stream=data, filetype="pdf") as doc:
        rect = doc[0].rect
        assert doc.metadata["title"] == "آزمون"
    a4 = fitz.paper_rect("a4")
    assert rect.width == pytest.approx(a4.width)
    assert rect.height == pytest.approx(a4.height)


def test_long_sheet_fits_on_one_page(exporter):
    questions = [{"id": i, "type": "LONG_ANSWER", "text": "توضیح دهید. " * 20} for i in range(1, 31)]
    exam = ExamPaper.model_validate({"questions": questions})
    assert pdf_page_count(exporter.export(exam)) == 1


def test_export_to_file(exporter, sample_exam, tmp_path):
    path = exporter.export_to_file(sample_exam, tmp_path / "exam.pdf")
    assert pdf_page_count(path.read_bytes()) == 2


def test_missing_font_dir_falls_back(sample_exam, tmp_path):
    exporter = PDFExporter(font_dir=str(tmp_path / "no-fonts"))
    assert pdf_page_count(exporter.export(sample_exam)) == 2
