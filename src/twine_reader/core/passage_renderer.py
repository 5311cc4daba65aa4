"""Render one passage into display text and its ordered outbound links."""

from __future__ import annotations

import re
from dataclasses import dataclass

from twine_reader.domain.models import Link, Passage

LINK_PATTERN = re.compile(r"\[\[(?P<contents>.*?)\]\]", re.DOTALL)
LINK_ARROW = "->"
BOLD_SOURCE = "''"
BOLD_MARKER = "**"
ITALIC_SOURCE = "//"
ITALIC_MARKER = "*"


@dataclass(frozen=True)
class RenderedPassage:
    """Display text with only link labels exposed, plus the links themselves."""

    passage_name: str
    display_text: str
    links: tuple[Link, ...]

    @property
    def terminal(self) -> bool:
        return not self.links


def parse_link_contents(contents: str) -> Link:
    """Split the inside of a ``[[...]]`` token into label and target."""
    label, arrow, target = contents.partition(LINK_ARROW)
    if not arrow:
        return Link(label=contents, target=contents)
    return Link(label=label, target=target)


def extract_links(raw_content: str) -> tuple[Link, ...]:
    """Return every link token in left-to-right order, duplicates included."""
    return tuple(
        parse_link_contents(match.group("contents"))
        for match in LINK_PATTERN.finditer(raw_content)
    )


def _expose_label(match: re.Match[str]) -> str:
    contents = match.group("contents")
    label, arrow, _ = contents.partition(LINK_ARROW)
    if not arrow:
        return match.group(0)
    return f"[[{label}]]"


def format_passage_text(raw_content: str) -> str:
    """Hide link targets, then translate Twee emphasis into chat markdown.

    Labels are substituted first so that ``//`` or ``''`` inside a hidden
    target never turns into emphasis. Strikethrough (``~~``) is identical in
    both syntaxes and passes through untouched.
    """
    text = LINK_PATTERN.sub(_expose_label, raw_content)
    text = text.replace(BOLD_SOURCE, BOLD_MARKER)
    return text.replace(ITALIC_SOURCE, ITALIC_MARKER)


def render_passage(passage: Passage) -> RenderedPassage:
    """Render a passage; pure, so repeated calls return equal values."""
    return RenderedPassage(
        passage_name=passage.name,
        display_text=format_passage_text(passage.raw_content),
        links=extract_links(passage.raw_content),
    )
