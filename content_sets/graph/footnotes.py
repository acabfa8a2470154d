"""
Footnote parser - splits authored glossary lines into vocabulary terms.

Footnotes arrive as free text from generation and from editors:

- "용어: 정의 (예시: 예시문장)" or "용어: 정의 (예: 예시문장)"
- "용어: 정의 (예시문장)" - plain trailing parenthetical, 5+ characters
- "용어: 정의. 예시: 예시문장" / "용어: 정의 예시: 예시문장"
- "용어: 정의 (예시:" - unterminated marker
- "용어만있는경우" - no colon at all

The serializer writes the canonical "term: definition (예: example)" form, which
parses back to the same triple.
"""

from __future__ import annotations

import re
from typing import NamedTuple

# Rules are tried in this order; the first match wins.
_MARKED_EXAMPLE = re.compile(r"^(.*?)\s*\(예시?:\s*(.+)\)\s*\.?$", re.DOTALL)
_TRAILING_PARENTHETICAL = re.compile(r"\s*\(([^)]{5,})\)\.?$")
_SENTENCE_EXAMPLE = re.compile(r"^(.+?)\.\s*예시:\s*(.+)$", re.DOTALL)
_INLINE_EXAMPLE = re.compile(r"^(.+?)\s+예시:\s*(.+)$", re.DOTALL)
_UNTERMINATED_EXAMPLE = re.compile(r"^(.+?)\s*\(예시?:\s*(.*)$", re.DOTALL)


class ParsedFootnote(NamedTuple):
    term: str
    definition: str
    example_sentence: str


def parse_footnote(footnote: str) -> ParsedFootnote:
    """Parse one footnote string into (term, definition, example_sentence)."""
    colon = footnote.find(":")
    if colon == -1:
        return ParsedFootnote(footnote.strip(), "", "")

    term = footnote[:colon].strip()
    remainder = footnote[colon + 1 :].strip()

    match = _MARKED_EXAMPLE.match(remainder)
    if match:
        return ParsedFootnote(term, match.group(1).strip(), match.group(2).strip())

    match = _TRAILING_PARENTHETICAL.search(remainder)
    if match:
        return ParsedFootnote(term, remainder[: match.start()].strip(), match.group(1).strip())

    for pattern in (_SENTENCE_EXAMPLE, _INLINE_EXAMPLE, _UNTERMINATED_EXAMPLE):
        match = pattern.match(remainder)
        if match:
            return ParsedFootnote(term, match.group(1).strip(), match.group(2).strip())

    return ParsedFootnote(term, remainder, "")


def footnote_from_term(term: str, definition: str, example_sentence: str | None = None) -> str:
    """Serialize a term back into footnote form."""
    footnote = f"{term}: {definition}"
    if example_sentence and example_sentence.strip():
        footnote += f" (예: {example_sentence})"
    return footnote


def parse_footnotes(footnotes: list[str]) -> list[ParsedFootnote]:
    return [parse_footnote(footnote) for footnote in footnotes]


def footnotes_from_terms(terms: list[ParsedFootnote]) -> list[str]:
    return [footnote_from_term(*term) for term in terms]
