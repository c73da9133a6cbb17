"""Default page layouts per document type."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentLayout:
    title_size: float = 22
    heading_size: float = 16
    subheading_size: float = 13
    body_size: float = 11
    margin_mm: float = 20
    line_spacing: float = 1.15
    paragraph_gap: float = 3
    body_font: str = "Helvetica"
    code_font: str = "Courier"

    def size_for(self, section_type: str) -> float:
        return {
            "title": self.title_size,
            "heading": self.heading_size,
            "subheading": self.subheading_size,
        }.get(section_type, self.body_size)


LAYOUTS: dict[str, DocumentLayout] = {
    "general": DocumentLayout(),
    "cv": DocumentLayout(
        title_size=24, heading_size=14, subheading_size=12, body_size=10,
        margin_mm=15, line_spacing=1.0, paragraph_gap=2,
    ),
    "research": DocumentLayout(
        title_size=18, heading_size=14, subheading_size=12, body_size=11,
        margin_mm=25, line_spacing=1.5, body_font="Times",
    ),
    "report": DocumentLayout(title_size=20, heading_size=16, subheading_size=13, margin_mm=22),
    "letter": DocumentLayout(
        title_size=14, heading_size=12, subheading_size=11, body_size=11,
        margin_mm=25, line_spacing=1.2, paragraph_gap=5, body_font="Times",
    ),
    "custom": DocumentLayout(),
}


def get_layout(document_type: str | None) -> DocumentLayout:
    return LAYOUTS.get(document_type or "general", LAYOUTS["general"])
