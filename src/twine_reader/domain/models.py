"""Core interactive-fiction domain models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class Link:
    """A labelled choice leading from one passage to another."""

    label: str
    target: str


@dataclass(frozen=True)
class Passage:
    """A named unit of story content with embedded choice links."""

    name: str
    raw_content: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class Story:
    """Immutable passage graph shared by every reader session."""

    passages: Mapping[str, Passage]
    start: str | None = None
    title: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.passages, MappingProxyType):
            object.__setattr__(self, "passages", MappingProxyType(dict(self.passages)))

    def get_passage(self, name: str) -> Passage | None:
        return self.passages.get(name)

    def passage_names(self) -> set[str]:
        return set(self.passages)


@dataclass(frozen=True)
class ReaderProgress:
    """Last passage a reader revealed; one row per reader."""

    reader_id: int
    current_passage: str


@dataclass(frozen=True)
class Session:
    """One render-await-resolve cycle for a reader.

    A fresh value is built for every cycle so the pending tokens always match
    exactly the controls that were last shown.
    """

    reader_id: int
    current_passage: str
    pending_choice_tokens: frozenset[str] = field(default_factory=frozenset)
    deadline: float = 0.0

    def accepts(self, token: str) -> bool:
        return token in self.pending_choice_tokens


@dataclass(frozen=True)
class PresentedChoice:
    """One selectable control shown beneath a message."""

    label: str
    token: str


@dataclass(frozen=True)
class PresentedMessage:
    """Display text plus the ordered controls the reader may select."""

    reader_id: int
    text: str
    choices: tuple[PresentedChoice, ...] = ()
    passage_name: str | None = None

    @property
    def terminal(self) -> bool:
        return not self.choices

    def tokens(self) -> frozenset[str]:
        return frozenset(choice.token for choice in self.choices)
