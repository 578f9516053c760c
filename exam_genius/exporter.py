"""
PDF export using PyMuPDF.
هر برگه آزمون به یک صفحه PDF تبدیل می‌شود.

Each rendered sheet becomes exactly one A4 page; content that would
overflow is scaled down to fit.
"""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from .config import get_settings
from .layout import paginate
from .renderer import render_sheet_document, sheet_css, style_css
from .schema import ExamPaper

logger = logging.getLogger(__name__)

_FONT_SUFFIXES = (".ttf", ".otf")
_EXPORT_FONT = "ExamFont"


class PDFExporter:
    """Converts exam sheets to a PDF document, one page per sheet."""

    def __init__(self, font_dir: str | None = None, paper: str = "a4", margin: float = 28.0):
        """
        Args:
            font_dir: Directory with a .ttf/.otf font covering Persian glyphs
                (default: PDF_FONT_DIR setting; MuPDF fallback fonts otherwise)
            paper: Paper name understood by fitz.paper_rect
            margin: Page margin in points
        """
        self.font_dir = Path(font_dir) if font_dir else None
        if self.font_dir is None and get_settings().PDF_FONT_DIR:
            self.font_dir = Path(get_settings().PDF_FONT_DIR)
        self.paper_rect = fitz.paper_rect(paper)
        self.margin = margin

    def _font_css(self) -> tuple[str, "fitz.Archive | None"]:
        if self.font_dir is None or not self.font_dir.is_dir():
            return "", None
        fonts = sorted(p for p in self.font_dir.iterdir() if p.suffix.lower() in _FONT_SUFFIXES)
        if not fonts:
            logger.warning("No .ttf/.otf fonts found in %s", self.font_dir)
            return "", None
        css = f"@font-face {{font-family: {_EXPORT_FONT}; src: url({fonts[0].name});}}\n"
        css += f".sheet {{font-family: {_EXPORT_FONT};}}\n"
        return css, fitz.Archive(str(self.font_dir))

    def export(self, exam: ExamPaper) -> bytes:
        """Render every sheet and return the PDF bytes."""
        font_css, archive = self._font_css()
        css = sheet_css() + "\n" + style_css(exam.style) + "\n" + font_css

        sheets = paginate(exam)
        with fitz.open() as doc:
            for sheet in sheets:
                page = doc.new_page(width=self.paper_rect.width, height=self.paper_rect.height)
                rect = page.rect + (self.margin, self.margin, -self.margin, -self.margin)
                html = render_sheet_document(exam, sheet)
                spare_height, scale = page.insert_htmlbox(rect, html, css=css, archive=archive, scale_low=0)
                if spare_height < 0:
                    logger.warning("Sheet %d did not fit on its page", sheet.number)
                elif scale < 1:
                    logger.debug("Sheet %d scaled to %.2f", sheet.number, scale)

            doc.set_metadata({"title": exam.header.title, "creator": "exam-genius"})
            data = doc.tobytes(garbage=3, deflate=True)

        logger.info("Exported %d sheets to PDF (%d bytes)", len(sheets), len(data))
        return data

    def export_to_file(self, exam: ExamPaper, output_path: str | Path) -> Path:
        output_path = Path(output_path)
        output_path.write_bytes(self.export(exam))
        return output_path


def pdf_page_count(data: bytes) -> int:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return doc.page_count
