"""Command router - classifies inbound messages by sender and dispatches them."""

import asyncio
import re
from enum import Enum
from typing import Iterable, Optional

from ..errors import BrokerError, InvalidCommand, NotFound
from ..models.message import InboundMessage
from ..transports.base import BaseTransport
from ..utils.keyed_lock import KeyedLock
from ..utils.logger import get_app_logger
from .conversation_engine import ConversationEngine
from .dispatcher import DispatchCondition
from .inquiry_desk import InquiryDesk


RESTART_COMMAND = "restart"
CLOSE_PATTERN = re.compile(r"^close\b\s*(?P<arg>\S*)", re.IGNORECASE)

RESTARTED = (
    "🔄 **SYSTEM RESTARTED**\n\n"
    "✅ Query counter reset to 0\n"
    "✅ All active queries cleared\n"
    "✅ Recent queries cleared\n"
    "✅ Seller conversations reset\n\n"
    "🚀 Ready for fresh start!"
)
RESTART_FAILED = "❌ Error during restart. Please try again."
CLOSE_USAGE = "❌ Invalid command. Use \"close <number>\" (e.g., \"close 12\")."
CLOSE_NOT_FOUND = "❌ Query #{number} not found."
CLOSED = "✅ Query #{number} ({topic}) has been closed."
ISSUED = "👍 Query #{number} for \"{topic}\" sent to {success}/{total} groups."
NOT_SENT_WARNING = (
    "⚠️ Warning: Message was not sent to any groups. "
    "Please check your group IDs in {topics_file}"
)
NO_TOPIC = "🤖 No valid product keyword found in \"{body}\". Available: {topics}"


class RouteOutcome(str, Enum):
    """Which path handled an inbound message."""
    REQUESTER = "requester"
    RESPONDENT = "respondent"
    IGNORED = "ignored"


class CommandRouter:
    """Entry point for every inbound message."""

    def __init__(
        self,
        transport: BaseTransport,
        desk: InquiryDesk,
        engine: ConversationEngine,
        identity_locks: KeyedLock,
        state_lock: asyncio.Lock,
        owner_id: str,
        group_suffix: str = "@g.us",
        ignored_senders: Optional[Iterable[str]] = None,
        topics_file: str = "groups.json"
    ):
        """
        Initialize the router.

        Args:
            transport: Messaging transport for requester replies
            desk: Inquiry desk handling requester commands
            engine: Conversation engine handling respondents
            identity_locks: Per-respondent locks
            state_lock: Global lock serializing requester commands and the sweep
            owner_id: Requester identity
            group_suffix: Sender suffix marking group-broadcast origin
            ignored_senders: System channels that are never processed
            topics_file: Topic configuration path, named in warnings
        """
        self.transport = transport
        self.desk = desk
        self.engine = engine
        self.identity_locks = identity_locks
        self.state_lock = state_lock
        self.owner_id = owner_id
        self.group_suffix = group_suffix
        self.ignored_senders = set(ignored_senders or ())
        self.topics_file = topics_file
        self.logger = get_app_logger()

    def classify_sender(self, sender: str) -> RouteOutcome:
        if not sender or sender in self.ignored_senders:
            return RouteOutcome.IGNORED
        if sender == self.owner_id:
            return RouteOutcome.REQUESTER
        if self.group_suffix and sender.endswith(self.group_suffix):
            return RouteOutcome.IGNORED
        return RouteOutcome.RESPONDENT

    async def route(self, message: InboundMessage) -> RouteOutcome:
        """
        Route one inbound message.

        Args:
            message: Inbound message

        Returns:
            RouteOutcome naming the path taken
        """
        outcome = self.classify_sender(message.sender)
        self.logger.info(
            f"Message from {message.sender or '(unknown)'}: "
            f"hasMedia={message.has_media}, body=\"{message.text}\" -> {outcome.value}"
        )

        if outcome == RouteOutcome.REQUESTER:
            async with self.state_lock:
                await self.handle_requester(message.text)
        elif outcome == RouteOutcome.RESPONDENT:
            async with self.identity_locks.acquire(message.sender):
                await self.engine.handle(message)
        return outcome

    async def _reply(self, text: str) -> None:
        if not await self.transport.send_text(self.owner_id, text):
            self.logger.warning("Reply to requester was not delivered")

    async def handle_requester(self, body: str) -> None:
        """Run a requester command: restart, close <n>, or a topic inquiry."""
        if body.lower() == RESTART_COMMAND:
            await self._restart()
            return

        match = CLOSE_PATTERN.match(body)
        if match:
            await self._close(match.group("arg"))
            return

        topic = self.desk.topics.resolve(body)
        if topic is None:
            await self._reply(NO_TOPIC.format(body=body, topics=", ".join(self.desk.topics.keywords)))
            return

        await self._issue(topic, body)

    async def _restart(self) -> None:
        try:
            self.desk.reset()
            self.engine.reset()
        except Exception as e:
            self.logger.error(f"Error during restart: {e}", exc_info=True)
            await self._reply(RESTART_FAILED)
            return

        self.logger.info("SYSTEM RESTART: All data reset by owner")
        await self._reply(RESTARTED)

    async def _close(self, argument: str) -> None:
        try:
            if not argument.isdigit():
                raise InvalidCommand(f"Not an inquiry number: {argument!r}")
            record = self.desk.close_inquiry(int(argument))
        except InvalidCommand as e:
            self.logger.warning(str(e))
            await self._reply(CLOSE_USAGE)
            return
        except NotFound as e:
            self.logger.warning(str(e))
            await self._reply(CLOSE_NOT_FOUND.format(number=e.sequence_number))
            return

        await self._reply(CLOSED.format(number=record.sequence_number, topic=record.topic))

    async def _issue(self, topic: str, body: str) -> None:
        try:
            record, report = await self.desk.issue_inquiry(topic, body)
        except BrokerError as e:
            self.logger.error(f"Could not issue inquiry for '{topic}': {e}")
            await self._reply(NO_TOPIC.format(body=body, topics=", ".join(self.desk.topics.keywords)))
            return

        await self._reply(ISSUED.format(
            number=record.sequence_number,
            topic=topic,
            success=report.success_count,
            total=report.total
        ))
        if report.nothing_delivered:
            if report.condition == DispatchCondition.NO_DESTINATIONS:
                self.logger.warning(f"No groups configured for '{topic}'")
            await self._reply(NOT_SENT_WARNING.format(topics_file=self.topics_file))
