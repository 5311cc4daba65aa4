"""Ports for progress persistence and the interactive transport."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from twine_reader.domain.models import PresentedMessage

if TYPE_CHECKING:
    from twine_reader.domain.events import ChoiceEvent


class ProgressStore(Protocol):
    """Persists the last passage each reader reached."""

    def get(self, reader_id: int) -> str | None:
        ...

    def set(self, reader_id: int, passage_name: str) -> None:
        ...


class InteractionResponder(Protocol):
    """Replies to one triggering interaction (a command or a selection)."""

    async def respond(self, message: PresentedMessage) -> None:
        ...

    async def withdraw_choices(self) -> None:
        ...

    async def fail(self, detail: str) -> None:
        ...


class ChoiceCollector(Protocol):
    """Waits for a selection event whose token is one of ``tokens``."""

    async def collect(
        self, tokens: frozenset[str], *, timeout_seconds: float
    ) -> ChoiceEvent | None:
        ...
