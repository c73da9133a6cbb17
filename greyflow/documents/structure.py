"""Turn free text into typed document sections.

A text-generation provider is asked for a JSON section list first. When there
is no provider, or its reply is not usable JSON, a markdown-style parse of the
content is used instead.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any

from greyflow.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)

SECTION_TYPES = ("title", "heading", "subheading", "paragraph", "list", "quote", "code")

STRUCTURE_PROMPT = """You format content into a document. Reply with JSON only, no prose:
{"sections": [{"type": "<title|heading|subheading|paragraph|list|quote|code>", "content": "<text>", "items": ["<list items, only for type list>"]}]}
The document type is: {document_type}. Keep the author's wording."""

_LIST_ITEM = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s+(.*)$")
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")


@dataclass
class Section:
    type: str
    content: str = ""
    items: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StructuredDocument:
    sections: list[Section]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str | None:
        for section in self.sections:
            if section.type == "title":
                return section.content
        return None


# ---------------------------------------------------------------------------
# Markdown fallback
# ---------------------------------------------------------------------------


def parse_markdown(content: str) -> list[Section]:
    sections: list[Section] = []
    paragraph: list[str] = []
    items: list[str] = []
    code: list[str] | None = None

    def flush():
        if paragraph:
            sections.append(Section("paragraph", " ".join(paragraph)))
            paragraph.clear()
        if items:
            sections.append(Section("list", items=list(items)))
            items.clear()

    for raw in content.splitlines():
        line = raw.rstrip()

        if code is not None:
            if line.strip().startswith("```"):
                sections.append(Section("code", "\n".join(code)))
                code = None
            else:
                code.append(raw)
            continue

        stripped = line.strip()
        if stripped.startswith("```"):
            flush()
            code = []
            continue
        if not stripped:
            flush()
            continue

        heading = re.match(r"^(#{1,6})\s+(.*)$", stripped)
        if heading:
            flush()
            level = len(heading.group(1))
            text = heading.group(2).strip()
            if level == 1 and not any(s.type == "title" for s in sections):
                sections.append(Section("title", text))
            elif level <= 2:
                sections.append(Section("heading", text))
            else:
                sections.append(Section("subheading", text))
            continue

        item = _LIST_ITEM.match(line)
        if item:
            if paragraph:
                sections.append(Section("paragraph", " ".join(paragraph)))
                paragraph.clear()
            items.append(item.group(1).strip())
            continue

        if stripped.startswith(">"):
            flush()
            sections.append(Section("quote", stripped.lstrip("> ").strip()))
            continue

        if items:
            sections.append(Section("list", items=list(items)))
            items.clear()
        paragraph.append(stripped)

    if code is not None:
        sections.append(Section("code", "\n".join(code)))
    flush()
    return sections


# ---------------------------------------------------------------------------
# Provider-structured
# ---------------------------------------------------------------------------


def parse_sections_json(text: str) -> list[Section] | None:
    """Parse a provider reply into sections, or None if it isn't a usable section list."""
    try:
        data = json.loads(_FENCE.sub("", text.strip()))
    except ValueError:
        return None

    raw_sections = data.get("sections") if isinstance(data, dict) else data
    if not isinstance(raw_sections, list):
        return None

    sections = []
    for raw in raw_sections:
        if not isinstance(raw, dict) or raw.get("type") not in SECTION_TYPES:
            continue
        items = raw.get("items") or []
        sections.append(Section(
            type=raw["type"],
            content=str(raw.get("content") or ""),
            items=[str(i) for i in items] if isinstance(items, list) else [],
        ))
    return sections or None


async def structure_document(
    content: str,
    document_type: str = "general",
    provider: ProviderAdapter | None = None,
) -> StructuredDocument:
    sections = None
    source = "markdown"

    if provider is not None:
        reply = await provider.generate(
            [{"role": "user", "content": content}],
            system=STRUCTURE_PROMPT.replace("{document_type}", document_type),
        )
        sections = parse_sections_json(reply)
        if sections:
            source = "provider"
        else:
            logger.warning("Provider reply was not a section list, falling back to markdown parse")

    if not sections:
        sections = parse_markdown(content)

    return StructuredDocument(
        sections=sections,
        metadata={"document_type": document_type, "section_count": len(sections), "structured_by": source},
    )
