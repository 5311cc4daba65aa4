"""Domain models, selection events, and ports for story playback."""

from twine_reader.domain.events import ButtonPressed, ChoiceEvent, MenuSelected, TextSubmitted
from twine_reader.domain.models import (
    Link,
    Passage,
    PresentedChoice,
    PresentedMessage,
    ReaderProgress,
    Session,
    Story,
)
from twine_reader.domain.ports import ChoiceCollector, InteractionResponder, ProgressStore

__all__ = [
    "ButtonPressed",
    "ChoiceCollector",
    "ChoiceEvent",
    "InteractionResponder",
    "Link",
    "MenuSelected",
    "Passage",
    "PresentedChoice",
    "PresentedMessage",
    "ProgressStore",
    "ReaderProgress",
    "Session",
    "Story",
    "TextSubmitted",
]
