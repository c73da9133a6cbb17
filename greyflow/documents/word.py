"""Word (.docx) rendering with python-docx."""

from __future__ import annotations

from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Mm, Pt

from greyflow.documents.layouts import DocumentLayout
from greyflow.documents.structure import Section, StructuredDocument

WORD_FONTS = {"Helvetica": "Arial", "Times": "Times New Roman", "Courier": "Courier New"}


class WordRenderer:
    def __init__(self, layout: DocumentLayout):
        self.layout = layout

    def render(self, document: StructuredDocument, path: Path) -> Path:
        layout = self.layout
        doc = Document()

        for section in doc.sections:
            section.left_margin = section.right_margin = Mm(layout.margin_mm)
            section.top_margin = section.bottom_margin = Mm(layout.margin_mm)

        normal = doc.styles["Normal"]
        normal.font.name = WORD_FONTS.get(layout.body_font, layout.body_font)
        normal.font.size = Pt(layout.body_size)
        normal.paragraph_format.line_spacing = layout.line_spacing
        normal.paragraph_format.space_after = Pt(layout.paragraph_gap * 2)

        if document.title:
            doc.core_properties.title = document.title

        for section in document.sections:
            self._add_section(doc, section)

        doc.save(str(path))
        return path

    def _add_section(self, doc, section: Section):
        size = Pt(self.layout.size_for(section.type))

        if section.type in ("title", "heading", "subheading"):
            level = {"title": 0, "heading": 1, "subheading": 2}[section.type]
            paragraph = doc.add_heading(section.content, level=level)
            if level == 0:
                paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
            for run in paragraph.runs:
                run.font.size = size
        elif section.type == "list":
            for item in section.items or [section.content]:
                doc.add_paragraph(item, style="List Bullet")
        elif section.type == "quote":
            doc.add_paragraph(section.content, style="Quote")
        elif section.type == "code":
            run = doc.add_paragraph().add_run(section.content)
            run.font.name = WORD_FONTS[self.layout.code_font]
            run.font.size = Pt(self.layout.body_size - 1)
        else:
            doc.add_paragraph(section.content)
