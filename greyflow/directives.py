"""Reserved response prefixes from the text-generation collaborator.

Workflow prompts instruct the model to start its reply with one of these
markers. The strings are matched exactly and case-sensitively; existing
workflow definitions depend on them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

MISSING_INFO = "MISSING_INFO:"
SECTION_COMPLETE = "SECTION_COMPLETE:"
COMPLETE = "COMPLETE:"


class DirectiveKind(str, Enum):
    COMPLETE = "complete"
    NEEDS_INFO = "needs_info"
    SECTION_COMPLETE = "section_complete"
    PLAIN_TEXT = "plain_text"


@dataclass(frozen=True)
class ParsedDirective:
    kind: DirectiveKind
    text: str
    raw: str = ""

    @property
    def is_final(self) -> bool:
        return self.kind in (DirectiveKind.COMPLETE, DirectiveKind.PLAIN_TEXT)


def parse_directive(response: str) -> ParsedDirective:
    """Classify a model reply by the marker it starts with.

    The marker must be the very first characters of the reply; a reply with
    leading whitespace is plain text.
    """
    if response.startswith(MISSING_INFO):
        return ParsedDirective(DirectiveKind.NEEDS_INFO, response[len(MISSING_INFO):].strip(), response)
    if response.startswith(SECTION_COMPLETE):
        return ParsedDirective(
            DirectiveKind.SECTION_COMPLETE, response[len(SECTION_COMPLETE):].strip(), response
        )
    if response.startswith(COMPLETE):
        return ParsedDirective(DirectiveKind.COMPLETE, response[len(COMPLETE):].strip(), response)
    return ParsedDirective(DirectiveKind.PLAIN_TEXT, response, response)
