"""Selection events a transport can deliver to a waiting session."""

from __future__ import annotations

from dataclasses import dataclass

from twine_reader.domain.ports import InteractionResponder


@dataclass(frozen=True)
class ButtonPressed:
    """A reader pressed one of the controls beneath a message."""

    token: str
    responder: InteractionResponder


@dataclass(frozen=True)
class MenuSelected:
    """A select-menu submission; never offered by story messages."""

    token: str
    values: tuple[str, ...]
    responder: InteractionResponder


@dataclass(frozen=True)
class TextSubmitted:
    """A free-text modal submission; never offered by story messages."""

    token: str
    text: str
    responder: InteractionResponder


ChoiceEvent = ButtonPressed | MenuSelected | TextSubmitted
