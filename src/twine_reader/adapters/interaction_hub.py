"""In-process transport that pairs presented messages with selection events."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from dataclasses import dataclass, replace
from uuid import uuid4

from twine_reader.domain.events import ChoiceEvent
from twine_reader.domain.models import PresentedMessage

DEFAULT_MAX_MESSAGES = 10_000

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageRecord:
    """A presented message as the reader currently sees it."""

    message_id: str
    message: PresentedMessage
    withdrawn: bool = False

    @property
    def active_choices(self) -> tuple[str, ...]:
        if self.withdrawn:
            return ()
        return tuple(choice.token for choice in self.message.choices)


@dataclass(frozen=True)
class InteractionReply:
    """First reply produced for one interaction: a message or a failure."""

    record: MessageRecord | None = None
    failure: str | None = None


class PendingInteraction:
    """Responder for one triggering interaction; the transport awaits its reply."""

    def __init__(self, hub: InteractionHub, reader_id: int) -> None:
        self._hub = hub
        self._reader_id = reader_id
        self._reply: asyncio.Future[InteractionReply] = asyncio.get_running_loop().create_future()
        self._message_id: str | None = None

    @property
    def reader_id(self) -> int:
        return self._reader_id

    async def respond(self, message: PresentedMessage) -> None:
        if self._reply.done():
            logger.warning("interaction.duplicate_reply reader_id=%s", self._reader_id)
            return
        record = self._hub.record_message(message)
        self._message_id = record.message_id
        self._reply.set_result(InteractionReply(record=record))

    async def withdraw_choices(self) -> None:
        if self._message_id is not None:
            self._hub.withdraw(self._message_id)

    async def fail(self, detail: str) -> None:
        if self._reply.done():
            logger.warning("interaction.late_failure reader_id=%s", self._reader_id)
            return
        self._reply.set_result(InteractionReply(failure=detail))

    async def wait_for_reply(self, timeout_seconds: float) -> InteractionReply | None:
        """Wait for the session to answer this interaction; None when it never does."""
        try:
            return await asyncio.wait_for(asyncio.shield(self._reply), timeout_seconds)
        except TimeoutError:
            return None


class InteractionHub:
    """Route selection events to the sessions waiting on their tokens."""

    def __init__(self, *, max_messages: int = DEFAULT_MAX_MESSAGES) -> None:
        self._waiters: dict[str, list[asyncio.Future[ChoiceEvent]]] = {}
        self._messages: OrderedDict[str, MessageRecord] = OrderedDict()
        self._max_messages = max_messages

    def open_interaction(self, reader_id: int) -> PendingInteraction:
        return PendingInteraction(self, reader_id)

    async def collect(
        self, tokens: frozenset[str], *, timeout_seconds: float
    ) -> ChoiceEvent | None:
        """Suspend until one of ``tokens`` is selected or the timeout elapses."""
        future: asyncio.Future[ChoiceEvent] = asyncio.get_running_loop().create_future()
        for token in tokens:
            self._waiters.setdefault(token, []).append(future)
        try:
            return await asyncio.wait_for(future, timeout_seconds)
        except TimeoutError:
            return None
        finally:
            for token in tokens:
                waiting = self._waiters.get(token)
                if waiting is None:
                    continue
                if future in waiting:
                    waiting.remove(future)
                if not waiting:
                    del self._waiters[token]

    def dispatch(self, event: ChoiceEvent) -> bool:
        """Deliver ``event`` to every session awaiting its token."""
        delivered = False
        for future in list(self._waiters.get(event.token, ())):
            if not future.done():
                future.set_result(event)
                delivered = True
        if not delivered:
            logger.info("interaction.unmatched token=%s", event.token)
        return delivered

    def is_pending(self, token: str) -> bool:
        return any(not future.done() for future in self._waiters.get(token, ()))

    def record_message(self, message: PresentedMessage) -> MessageRecord:
        record = MessageRecord(message_id=uuid4().hex, message=message)
        self._messages[record.message_id] = record
        while len(self._messages) > self._max_messages:
            self._messages.popitem(last=False)
        return record

    def withdraw(self, message_id: str) -> None:
        record = self._messages.get(message_id)
        if record is None or record.withdrawn:
            return
        self._messages[message_id] = replace(record, withdrawn=True)
        logger.debug("interaction.withdrawn message_id=%s", message_id)

    def get_message(self, message_id: str) -> MessageRecord | None:
        return self._messages.get(message_id)
