"""Test document structuring and rendering."""

import pytest
from docx import Document

from conftest import FakeProvider
from greyflow.documents import output_filename, render_and_save
from greyflow.documents.layouts import LAYOUTS, get_layout
from greyflow.documents.structure import (
    Section,
    StructuredDocument,
    parse_markdown,
    parse_sections_json,
    structure_document,
)
from greyflow.errors import DocumentError, ProviderError

SAMPLE = """# Jane Doe

Senior engineer with ten years
of experience.

## Experience
- Built the billing system
- Led a team of five

### Tools
> Simplicity is prerequisite for reliability.

```
print("hi")
```
"""


def test_parse_markdown_sections():
    sections = parse_markdown(SAMPLE)

    assert [s.type for s in sections] == ["title", "paragraph", "heading", "list", "subheading", "quote", "code"]
    assert sections[0].content == "Jane Doe"
    assert sections[1].content == "Senior engineer with ten years of experience."
    assert sections[3].items == ["Built the billing system", "Led a team of five"]
    assert sections[5].content == "Simplicity is prerequisite for reliability."
    assert sections[6].content == 'print("hi")'


def test_parse_markdown_second_h1_is_heading():
    sections = parse_markdown("# One\n# Two")
    assert [s.type for s in sections] == ["title", "heading"]


def test_parse_markdown_unclosed_code_block():
    sections = parse_markdown("```\nx = 1")
    assert sections == [Section("code", "x = 1")]


def test_parse_sections_json():
    reply = '```json\n{"sections": [{"type": "title", "content": "T"}, {"type": "bogus"}, ' \
            '{"type": "list", "items": ["a", 2]}]}\n```'
    sections = parse_sections_json(reply)

    assert sections == [Section("title", "T"), Section("list", "", ["a", "2"])]


def test_parse_sections_json_rejects_unusable():
    assert parse_sections_json("not json") is None
    assert parse_sections_json('{"sections": "nope"}') is None
    assert parse_sections_json('{"sections": [{"type": "bogus"}]}') is None


@pytest.mark.asyncio
async def test_structure_without_provider_uses_markdown():
    doc = await structure_document(SAMPLE, "cv")

    assert doc.title == "Jane Doe"
    assert doc.metadata == {"document_type": "cv", "section_count": 7, "structured_by": "markdown"}


@pytest.mark.asyncio
async def test_structure_with_provider():
    provider = FakeProvider('{"sections": [{"type": "heading", "content": "H"}]}')
    doc = await structure_document("text", "report", provider)

    assert doc.sections == [Section("heading", "H")]
    assert doc.metadata["structured_by"] == "provider"
    assert "report" in provider.calls[0]["system"]


@pytest.mark.asyncio
async def test_structure_falls_back_on_bad_reply():
    doc = await structure_document("Just a paragraph.", "general", FakeProvider("Sure! Here it is"))

    assert doc.sections == [Section("paragraph", "Just a paragraph.")]
    assert doc.metadata["structured_by"] == "markdown"


@pytest.mark.asyncio
async def test_structure_propagates_provider_errors():
    with pytest.raises(ProviderError):
        await structure_document("x", "general", FakeProvider(ProviderError("down")))


def test_layouts():
    assert set(LAYOUTS) == {"general", "cv", "research", "report", "letter", "custom"}
    assert get_layout("unknown") is LAYOUTS["general"]
    assert get_layout(None) is LAYOUTS["general"]
    assert get_layout("cv").size_for("title") == 24
    assert get_layout("cv").size_for("paragraph") == 10


def test_output_filename():
    assert output_filename(None, "cv", "pdf") == "cv_document.pdf"
    assert output_filename("report.pdf", "general", "pdf") == "report.pdf"
    assert output_filename("notes.txt", "general", "word") == "notes.docx"
    assert output_filename("../../etc/passwd", "general", "pdf") == "passwd.pdf"
    assert output_filename("  ", "letter", "word") == "letter_document.docx"


def test_render_pdf(tmp_path):
    doc = StructuredDocument(sections=parse_markdown(SAMPLE + "\nCurly “quotes” – dash"))
    message = render_and_save(doc, "pdf", "research", "paper", tmp_path)

    assert message == "PDF document generated: paper.pdf"
    assert (tmp_path / "paper.pdf").read_bytes().startswith(b"%PDF")


def test_render_word(tmp_path):
    doc = StructuredDocument(sections=parse_markdown(SAMPLE))
    message = render_and_save(doc, "word", "cv", "cv.docx", tmp_path / "out")

    assert message == "Word document generated: cv.docx"
    written = Document(str(tmp_path / "out" / "cv.docx"))
    texts = [p.text for p in written.paragraphs]
    assert "Jane Doe" in texts
    assert "Built the billing system" in texts
    assert written.core_properties.title == "Jane Doe"


def test_render_unknown_format(tmp_path):
    with pytest.raises(DocumentError, match="Unsupported document format"):
        render_and_save(StructuredDocument(sections=[]), "odt", output_dir=tmp_path)


def test_render_failure_is_wrapped(tmp_path, monkeypatch):
    def explode(self, document, path):
        raise OSError("disk full")

    monkeypatch.setattr("greyflow.documents.pdf.PdfRenderer.render", explode)
    with pytest.raises(DocumentError, match="Failed to generate PDF document: disk full"):
        render_and_save(StructuredDocument(sections=[]), "pdf", output_dir=tmp_path)
