"""Per-reader navigation: present a passage, await a choice, persist, repeat."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Literal

from twine_reader.core.choice_tokens import decode_choice_token, encode_choice_token
from twine_reader.core.errors import (
    MissingPassageError,
    NoStartPassageError,
    ProgressStoreError,
    UnexpectedInteractionError,
)
from twine_reader.core.passage_renderer import render_passage
from twine_reader.domain.events import ButtonPressed, ChoiceEvent, MenuSelected, TextSubmitted
from twine_reader.domain.models import (
    Passage,
    PresentedChoice,
    PresentedMessage,
    Session,
    Story,
)
from twine_reader.domain.ports import ChoiceCollector, InteractionResponder, ProgressStore

DEFAULT_CHOICE_TIMEOUT_SECONDS = 600.0
TUTORIAL_PASSAGE_NAME = "Tutorial"
TUTORIAL_CHOICE_LABEL = "Click here to start"
TUTORIAL_TEXT = (
    "# Tutorial\n\n"
    "When playing through this story, you will see text in double-brackets. "
    f"For example, it'll look like this: [[{TUTORIAL_CHOICE_LABEL}]].\n"
    "If you see that, a button with the same text at the bottom of the post will take you "
    "to that page.\n\n"
    "Try it now!"
)
GENERIC_FAILURE_TEXT = "Something went wrong while continuing the story. Please try again later."

SessionOutcome = Literal["terminal", "timed_out", "failed"]

logger = logging.getLogger(__name__)


def message_from_passage(reader_id: int, passage: Passage) -> PresentedMessage:
    """Present a passage with one control per link, in link order."""
    rendered = render_passage(passage)
    choices = tuple(
        PresentedChoice(
            label=link.label,
            token=encode_choice_token(reader_id, index, link.target),
        )
        for index, link in enumerate(rendered.links)
    )
    return PresentedMessage(
        reader_id=reader_id,
        text=rendered.display_text,
        choices=choices,
        passage_name=passage.name,
    )


def tutorial_message(reader_id: int, start_passage: str) -> PresentedMessage:
    """Onboarding message whose only control leads to the story's start passage."""
    return PresentedMessage(
        reader_id=reader_id,
        text=TUTORIAL_TEXT,
        choices=(
            PresentedChoice(
                label=TUTORIAL_CHOICE_LABEL,
                token=encode_choice_token(reader_id, 0, start_passage),
            ),
        ),
        passage_name=None,
    )


class SessionController:
    """Drive one reader through the story until a terminal passage, timeout, or failure."""

    def __init__(
        self,
        story: Story,
        progress_store: ProgressStore,
        collector: ChoiceCollector,
        *,
        choice_timeout_seconds: float = DEFAULT_CHOICE_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._story = story
        self._progress_store = progress_store
        self._collector = collector
        self._choice_timeout_seconds = choice_timeout_seconds
        self._clock = clock

    @property
    def story(self) -> Story:
        return self._story

    async def play(self, reader_id: int, responder: InteractionResponder) -> SessionOutcome:
        """Run the navigation loop for one triggering interaction.

        Selection events carry their own responder; failures are reported on
        whichever interaction is current when they happen.
        """
        current = responder
        logger.info("session.start reader_id=%s", reader_id)
        try:
            message = await self._opening_message(reader_id)
            while True:
                presented_at = self._clock()
                await current.respond(message)
                if message.terminal:
                    logger.info(
                        "session.terminal reader_id=%s passage=%s", reader_id, message.passage_name
                    )
                    return "terminal"

                session = self._begin_cycle(reader_id, message, presented_at)
                event = await self._collector.collect(
                    session.pending_choice_tokens,
                    timeout_seconds=self._remaining_seconds(session),
                )
                await current.withdraw_choices()
                if event is None:
                    logger.info(
                        "session.timeout reader_id=%s passage=%s",
                        reader_id,
                        session.current_passage,
                    )
                    return "timed_out"

                current = event.responder
                target = self._selected_target(session, event)
                passage = self._story.get_passage(target)
                if passage is None:
                    raise MissingPassageError(target)
                await asyncio.to_thread(self._progress_store.set, reader_id, target)
                logger.info("session.advance reader_id=%s passage=%s", reader_id, target)
                message = message_from_passage(reader_id, passage)
        except (MissingPassageError, ProgressStoreError) as exc:
            logger.warning("session.failed reader_id=%s error=%s", reader_id, exc)
        except UnexpectedInteractionError:
            logger.exception("session.invariant_violation reader_id=%s", reader_id)
        except Exception:
            logger.exception("session.unexpected_error reader_id=%s", reader_id)
        await current.fail(GENERIC_FAILURE_TEXT)
        return "failed"

    async def _opening_message(self, reader_id: int) -> PresentedMessage:
        stored = await asyncio.to_thread(self._progress_store.get, reader_id)
        if stored is not None:
            passage = self._story.get_passage(stored)
            if passage is not None:
                logger.info("session.resume reader_id=%s passage=%s", reader_id, stored)
                return message_from_passage(reader_id, passage)
            logger.warning(
                "session.stale_progress reader_id=%s passage=%s; showing tutorial",
                reader_id,
                stored,
            )
        if self._story.start is None:
            raise NoStartPassageError("No start passage defined")
        return tutorial_message(reader_id, self._story.start)

    def _begin_cycle(
        self, reader_id: int, message: PresentedMessage, presented_at: float
    ) -> Session:
        return Session(
            reader_id=reader_id,
            current_passage=message.passage_name or TUTORIAL_PASSAGE_NAME,
            pending_choice_tokens=message.tokens(),
            deadline=presented_at + self._choice_timeout_seconds,
        )

    def _remaining_seconds(self, session: Session) -> float:
        """Time left on the choice window, which opens when the choices are shown."""
        return max(0.0, session.deadline - self._clock())

    @staticmethod
    def _selected_target(session: Session, event: ChoiceEvent) -> str:
        if isinstance(event, ButtonPressed):
            if not session.accepts(event.token):
                raise UnexpectedInteractionError(
                    f"Selection {event.token!r} was not offered in this cycle"
                )
            return decode_choice_token(event.token).target
        if isinstance(event, (MenuSelected, TextSubmitted)):
            raise UnexpectedInteractionError(
                f"Story messages never offer {type(event).__name__} interactions"
            )
        raise UnexpectedInteractionError(f"Unknown selection event: {event!r}")
