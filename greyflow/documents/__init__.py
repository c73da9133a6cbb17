"""Document generation for ``pdf`` and ``word`` nodes."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from greyflow.config import OUTPUT_DIR
from greyflow.documents.layouts import DocumentLayout, get_layout
from greyflow.documents.pdf import PdfRenderer
from greyflow.documents.structure import Section, StructuredDocument, parse_markdown, structure_document
from greyflow.documents.word import WordRenderer
from greyflow.errors import DocumentError

logger = logging.getLogger(__name__)

FORMATS = {
    "pdf": (".pdf", "PDF", PdfRenderer),
    "word": (".docx", "Word", WordRenderer),
}


def output_filename(filename: str | None, document_type: str, fmt: str) -> str:
    """Sanitised file name with the right extension for ``fmt``."""
    suffix = FORMATS[fmt][0]
    name = (filename or "").strip() or f"{document_type}_document{suffix}"
    name = re.sub(r"[^\w.\- ]", "_", Path(name).name)
    if not name.lower().endswith(suffix):
        name = f"{Path(name).stem}{suffix}"
    return name


def render_and_save(
    document: StructuredDocument,
    fmt: str,
    document_type: str = "general",
    filename: str | None = None,
    output_dir: Path = OUTPUT_DIR,
) -> str:
    """Render ``document`` into ``output_dir`` and return the confirmation line."""
    if fmt not in FORMATS:
        raise DocumentError(f"Unsupported document format: {fmt}")

    _, label, renderer_cls = FORMATS[fmt]
    name = output_filename(filename, document_type, fmt)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / name

    try:
        renderer_cls(get_layout(document_type)).render(document, path)
    except Exception as e:
        logger.error(f"Rendering {label} document {name} failed: {e}", exc_info=True)
        raise DocumentError(f"Failed to generate {label} document: {e}") from e

    logger.info(f"Wrote {label} document to {path}")
    return f"{label} document generated: {name}"


__all__ = [
    "DocumentLayout",
    "Section",
    "StructuredDocument",
    "get_layout",
    "output_filename",
    "parse_markdown",
    "render_and_save",
    "structure_document",
]
