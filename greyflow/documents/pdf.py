"""PDF rendering with fpdf2."""

from __future__ import annotations

from pathlib import Path

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from greyflow.documents.layouts import DocumentLayout
from greyflow.documents.structure import Section, StructuredDocument

PT_TO_MM = 0.3528

# The built-in PDF fonts only cover latin-1.
_REPLACEMENTS = {
    "‘": "'", "’": "'", "“": '"', "”": '"',
    "–": "-", "—": "-", "•": "-", "…": "...",
}


def _latin1(text: str) -> str:
    for src, dst in _REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text.encode("latin-1", "replace").decode("latin-1")


class PdfRenderer:
    def __init__(self, layout: DocumentLayout):
        self.layout = layout

    def render(self, document: StructuredDocument, path: Path) -> Path:
        layout = self.layout
        pdf = FPDF(format="A4")
        pdf.set_margins(layout.margin_mm, layout.margin_mm, layout.margin_mm)
        pdf.set_auto_page_break(auto=True, margin=layout.margin_mm)
        if document.title:
            pdf.set_title(_latin1(document.title))
        pdf.add_page()

        for section in document.sections:
            self._write_section(pdf, section)

        pdf.output(str(path))
        return path

    def _line_height(self, size: float) -> float:
        return size * PT_TO_MM * self.layout.line_spacing * 1.2

    def _write(self, pdf: FPDF, text: str, size: float, font: str | None = None, style: str = "", align: str = "L"):
        pdf.set_font(font or self.layout.body_font, style=style, size=size)
        pdf.multi_cell(0, self._line_height(size), _latin1(text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def _write_section(self, pdf: FPDF, section: Section):
        layout = self.layout
        size = layout.size_for(section.type)

        if section.type == "title":
            self._write(pdf, section.content, size, style="B", align="C")
            pdf.ln(layout.paragraph_gap * 2)
        elif section.type in ("heading", "subheading"):
            pdf.ln(layout.paragraph_gap)
            self._write(pdf, section.content, size, style="B")
            pdf.ln(layout.paragraph_gap / 2)
        elif section.type == "list":
            for item in section.items or [section.content]:
                self._write(pdf, f"- {item}", size)
            pdf.ln(layout.paragraph_gap)
        elif section.type == "quote":
            pdf.set_x(layout.margin_mm + 8)
            self._write(pdf, section.content, size, style="I")
            pdf.ln(layout.paragraph_gap)
        elif section.type == "code":
            self._write(pdf, section.content, size - 1, font=layout.code_font)
            pdf.ln(layout.paragraph_gap)
        else:
            self._write(pdf, section.content, size)
            pdf.ln(layout.paragraph_gap)
