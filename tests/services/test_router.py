"""Tests for CommandRouter through a fully wired Broker."""

import asyncio
import json

from broker.models.conversation import ConversationState
from broker.models.inquiry import InquiryStatus
from broker.services.router import CLOSE_USAGE, RESTARTED, RouteOutcome
from tests.fakes import GROUP_1, GROUP_2, OWNER, SELLER, text_message


class TestSenderClassification:
    """SUT: CommandRouter.route sender filtering"""

    async def test_ignores_group_broadcast_and_empty_senders(self, broker, transport):
        """Group, system broadcast and empty senders are dropped."""
        for sender in [GROUP_1, "status@broadcast", ""]:
            assert await broker.handle(text_message(sender, "need laptop")) == RouteOutcome.IGNORED
        assert transport.texts == []
        assert len(broker.ledger) == 0

    async def test_respondent_goes_to_engine(self, broker):
        """Other direct senders open a conversation."""
        assert await broker.handle(text_message(SELLER, "hi")) == RouteOutcome.RESPONDENT
        assert broker.engine.get(SELLER).state == ConversationState.COLLECTING

    async def test_concurrent_first_messages_open_one_conversation(self, broker, transport):
        """Two simultaneous first messages share one conversation and one welcome."""
        await asyncio.gather(
            broker.handle(text_message(SELLER, "hi")),
            broker.handle(text_message(SELLER, "price 500"))
        )

        assert len(broker.engine.list_all()) == 1
        welcomes = [t for t in transport.texts_to(SELLER) if t.startswith("Thanks for replying privately")]
        assert len(welcomes) == 1
        assert broker.engine.get(SELLER).text == "price 500"


class TestIssue:
    """SUT: requester topic inquiries"""

    async def test_issue_broadcasts_and_reports(self, broker, transport):
        """A keyword message is broadcast and the requester gets the count."""
        outcome = await broker.handle(text_message(OWNER, "Need LAPTOP i5 8GB"))

        assert outcome == RouteOutcome.REQUESTER
        assert transport.texts_to(GROUP_1) == ["I am looking for : Need LAPTOP i5 8GB if you have Reply Privately"]
        assert transport.texts_to(OWNER) == ["👍 Query #1 for \"LAPTOP\" sent to 2/2 groups."]
        assert broker.correlation.get("LAPTOP").sequence_number == 1

    async def test_partial_failure_keeps_record_active(self, broker, transport):
        """A partially failed fan-out still leaves the inquiry active."""
        transport.failing.add(GROUP_1)

        await broker.handle(text_message(OWNER, "need laptop"))

        assert transport.texts_to(OWNER) == ["👍 Query #1 for \"LAPTOP\" sent to 1/2 groups."]
        assert broker.ledger.get(1).status == InquiryStatus.ACTIVE

    async def test_no_destinations_warns(self, broker, transport):
        """A topic with no groups is issued with a warning."""
        await broker.handle(text_message(OWNER, "need mouse"))

        replies = transport.texts_to(OWNER)
        assert replies[0] == "👍 Query #1 for \"MOUSE\" sent to 0/0 groups."
        assert replies[1].startswith("⚠️ Warning")
        assert broker.ledger.counter == 1

    async def test_unknown_topic_lists_keywords(self, broker, transport):
        """An unmatched message lists the configured topics."""
        await broker.handle(text_message(OWNER, "need a chair"))
        reply = transport.texts_to(OWNER)[0]
        assert "LAPTOP, MONITOR, MOUSE" in reply
        assert broker.ledger.counter == 0

    async def test_issue_persists_state(self, broker, test_settings):
        """Issuance writes the counter and recent topic to the store."""
        await broker.handle(text_message(OWNER, "need monitor"))
        with open(test_settings.state_file, encoding="utf-8") as f:
            data = json.load(f)
        assert data["counter"] == 1
        assert data["recent_topics"]["MONITOR"]["sequence_number"] == 1


class TestClose:
    """SUT: close <n>"""

    async def test_close_existing(self, broker, transport):
        """Closing a known inquiry confirms to the requester."""
        await broker.handle(text_message(OWNER, "need laptop"))
        await broker.handle(text_message(OWNER, "close 1"))
        assert broker.ledger.get(1).status == InquiryStatus.CLOSED
        assert transport.texts_to(OWNER)[-1] == "✅ Query #1 (LAPTOP) has been closed."

    async def test_close_non_numeric(self, broker, transport):
        """A non-numeric argument gets the usage reply."""
        await broker.handle(text_message(OWNER, "close abc"))
        assert transport.texts_to(OWNER) == [CLOSE_USAGE]

    async def test_close_unknown_does_not_mutate(self, broker, transport):
        """Closing an unknown number changes nothing."""
        await broker.handle(text_message(OWNER, "need laptop"))
        await broker.handle(text_message(OWNER, "close 42"))
        assert transport.texts_to(OWNER)[-1] == "❌ Query #42 not found."
        assert len(broker.ledger) == 1
        assert broker.ledger.get(1).status == InquiryStatus.ACTIVE


class TestRestart:
    """SUT: restart"""

    async def test_restart_wipes_everything(self, broker, transport):
        """Restart clears ledger, counter, correlation and conversations."""
        await broker.handle(text_message(OWNER, "need laptop"))
        await broker.handle(text_message(SELLER, "hi"))

        await broker.handle(text_message(OWNER, "RESTART"))

        assert transport.texts_to(OWNER)[-1] == RESTARTED
        assert broker.ledger.counter == 0
        assert len(broker.ledger) == 0
        assert len(broker.correlation) == 0
        assert broker.engine.list_all() == []

        await broker.handle(text_message(OWNER, "need laptop"))
        assert broker.ledger.get(1) is not None
