from __future__ import annotations

import asyncio

from twine_reader.adapters.interaction_hub import InteractionHub
from twine_reader.domain.events import ButtonPressed
from twine_reader.domain.models import PresentedChoice, PresentedMessage


def test_collect_times_out_and_releases_registrations() -> None:
    async def scenario() -> None:
        hub = InteractionHub()
        result = await hub.collect(frozenset({"1-0|A"}), timeout_seconds=0.01)
        assert result is None
        assert not hub.is_pending("1-0|A")

    asyncio.run(scenario())


def test_dispatch_resumes_waiting_collector() -> None:
    async def scenario() -> None:
        hub = InteractionHub()
        waiter = asyncio.create_task(
            hub.collect(frozenset({"1-0|A", "1-1|B"}), timeout_seconds=5)
        )
        await asyncio.sleep(0)
        assert hub.is_pending("1-1|B")

        interaction = hub.open_interaction(1)
        assert hub.dispatch(ButtonPressed(token="1-1|B", responder=interaction))
        event = await waiter
        assert event is not None
        assert event.token == "1-1|B"
        assert not hub.is_pending("1-0|A")
        assert not hub.dispatch(ButtonPressed(token="1-0|A", responder=interaction))

    asyncio.run(scenario())


def test_cancelled_collect_releases_registrations() -> None:
    async def scenario() -> None:
        hub = InteractionHub()
        waiter = asyncio.create_task(hub.collect(frozenset({"1-0|A"}), timeout_seconds=5))
        await asyncio.sleep(0)
        waiter.cancel()
        await asyncio.gather(waiter, return_exceptions=True)
        assert not hub.is_pending("1-0|A")

    asyncio.run(scenario())


def test_responder_reply_and_withdraw() -> None:
    async def scenario() -> None:
        hub = InteractionHub()
        interaction = hub.open_interaction(3)
        message = PresentedMessage(
            reader_id=3,
            text="Hello [[Go]]",
            choices=(PresentedChoice(label="Go", token="3-0|Go"),),
            passage_name="Start",
        )
        await interaction.respond(message)
        reply = await interaction.wait_for_reply(1)
        assert reply is not None and reply.record is not None
        assert reply.record.active_choices == ("3-0|Go",)

        await interaction.withdraw_choices()
        stored = hub.get_message(reply.record.message_id)
        assert stored is not None
        assert stored.withdrawn
        assert stored.active_choices == ()

    asyncio.run(scenario())


def test_failure_reply_and_silence() -> None:
    async def scenario() -> None:
        hub = InteractionHub()
        silent = hub.open_interaction(1)
        assert await silent.wait_for_reply(0.01) is None

        failing = hub.open_interaction(2)
        await failing.fail("Something went wrong")
        reply = await failing.wait_for_reply(1)
        assert reply is not None
        assert reply.record is None
        assert reply.failure == "Something went wrong"

    asyncio.run(scenario())


def test_message_retention_is_bounded() -> None:
    hub = InteractionHub(max_messages=2)
    first = hub.record_message(PresentedMessage(reader_id=1, text="one"))
    hub.record_message(PresentedMessage(reader_id=1, text="two"))
    hub.record_message(PresentedMessage(reader_id=1, text="three"))
    assert hub.get_message(first.message_id) is None
