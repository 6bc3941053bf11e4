"""Tests for HousekeepingSweep."""

import asyncio

from broker.models.conversation import ConversationState
from tests.fakes import OWNER, SELLER, text_message


OTHER = "15553334444@c.us"


async def _complete(broker, sender):
    for body in ["hi", "price 500", "finished", "confirm"]:
        await broker.handle(text_message(sender, body))


class TestRunOnce:
    """SUT: HousekeepingSweep.run_once"""

    async def test_expires_old_open_conversations_only(self, broker, clock):
        """Old open conversations expire; completed ones are untouched."""
        await broker.handle(text_message(SELLER, "hi"))
        await _complete(broker, OTHER)
        clock.advance(hours=2, minutes=1)

        result = await broker.housekeeping.run_once()

        assert result.expired_conversations == [SELLER]
        assert broker.engine.get(SELLER).state == ConversationState.EXPIRED
        assert broker.engine.get(OTHER).state == ConversationState.COMPLETED

    async def test_expired_record_keeps_data(self, broker, clock):
        """Expiry keeps the collected data in place."""
        await broker.handle(text_message(SELLER, "hi"))
        await broker.handle(text_message(SELLER, "price 500"))
        clock.advance(hours=3)

        await broker.housekeeping.run_once()

        assert broker.engine.get(SELLER).text == "price 500"

    async def test_young_conversations_untouched(self, broker, clock):
        """Conversations younger than the TTL stay open."""
        await broker.handle(text_message(SELLER, "hi"))
        clock.advance(hours=1)
        result = await broker.housekeeping.run_once()
        assert result.expired_conversations == []
        assert broker.engine.get(SELLER).state == ConversationState.COLLECTING

    async def test_skips_identity_with_event_in_flight(self, broker, clock):
        """An identity whose lock is held is left for the next sweep."""
        await broker.handle(text_message(SELLER, "hi"))
        clock.advance(hours=3)

        async with broker.identity_locks.acquire(SELLER):
            result = await broker.housekeeping.run_once()

        assert result.expired_conversations == []
        assert broker.engine.get(SELLER).state == ConversationState.COLLECTING

    async def test_prunes_old_topics(self, broker, clock):
        """Topic entries older than retention are pruned; the ledger is kept."""
        await broker.handle(text_message(OWNER, "need laptop"))
        clock.advance(hours=25)

        result = await broker.housekeeping.run_once()

        assert result.pruned_topics == ["LAPTOP"]
        assert broker.correlation.get("LAPTOP") is None
        assert broker.ledger.get(1) is not None

    async def test_expired_conversation_restarts_on_next_message(self, broker, clock):
        """A message after expiry opens a fresh conversation."""
        await broker.handle(text_message(SELLER, "hi"))
        clock.advance(hours=3)
        await broker.housekeeping.run_once()

        record = await broker.engine.handle(text_message(SELLER, "hello again"))
        assert record.state == ConversationState.COLLECTING
        assert record.started_at == clock.now()


class TestLifecycle:
    """SUT: HousekeepingSweep.start / stop"""

    async def test_start_and_stop(self, broker):
        """The periodic task starts and is cancelled cleanly."""
        broker.housekeeping.interval = 0.01
        broker.housekeeping.start()
        assert broker.housekeeping.running
        await asyncio.sleep(0.05)
        await broker.housekeeping.stop()
        assert not broker.housekeeping.running
