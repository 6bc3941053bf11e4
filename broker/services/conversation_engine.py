"""Conversation engine - one state machine per respondent identity."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Tuple

from ..errors import AssemblyFailure
from ..models.conversation import AttachmentRecord, ConversationRecord, ConversationState
from ..models.message import InboundMessage
from ..transports.base import BaseTransport
from ..utils.clock import SystemClock
from ..utils.logger import get_app_logger
from .assembler import ReportAssembler
from .correlation import CorrelationIndex


FINISHED_KEYWORD = "finished"
CONFIRM_KEYWORD = "confirm"
CANCEL_KEYWORD = "cancel"

INSTRUCTIONS = (
    "Please send:\n\n"
    "• 💰 Price details\n"
    "• ⭐ Quality information\n"
    "• 🚚 Delivery time\n"
    "• 🏢 Company name\n"
    "• 📸 Product photos (if available)\n\n"
    "*You can send text and images in any order. "
    "When you're done, type \"FINISHED\" to submit everything.*"
)
MORE_OR_FINISH = "Send more details/images or type \"FINISHED\" when done."
ATTACHMENT_ACK = "📸 Image received! ({count} total)\n\n" + MORE_OR_FINISH
TEXT_ACK = "✅ Information received!\n\n" + MORE_OR_FINISH
DOWNLOAD_FAILED = "❌ Failed to receive image. Please try again."
NOTHING_COLLECTED = "❌ Please provide some information (text or images) before finishing."
SUMMARY = (
    "📋 *SUMMARY OF YOUR RESPONSE:*\n\n"
    "📝 *Text Details:* {text}\n"
    "📸 *Images:* {count} photo(s)\n\n"
    "Type \"CONFIRM\" to send this to the buyer, or \"CANCEL\" to start over."
)
CLEARED = (
    "🔄 Response cleared. Please provide your details again.\n\n"
    "Send text and images, then type \"FINISHED\" when done."
)
REPROMPT = "Please type \"CONFIRM\" to send your response or \"CANCEL\" to start over."
ASSEMBLY_FAILED = "❌ Sorry, there was an error processing your response. Please try again."


class ConversationInput(str, Enum):
    """Classified inbound event."""
    ATTACHMENT = "attachment"
    FINISHED = "finished"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    TEXT = "text"
    EMPTY = "empty"


class Effect(str, Enum):
    """Side effect requested by a transition."""
    START = "start"
    STORE_ATTACHMENT = "store_attachment"
    APPEND_TEXT = "append_text"
    SUMMARIZE = "summarize"
    REJECT_EMPTY = "reject_empty"
    ASSEMBLE = "assemble"
    CLEAR = "clear"
    REPROMPT = "reprompt"


@dataclass(frozen=True)
class Transition:
    """Next state plus the effects that must all succeed before it is committed."""
    next_state: ConversationState
    effects: Tuple[Effect, ...] = ()


def classify(text: str, has_attachment: bool) -> ConversationInput:
    """Classify an inbound message; attachments take precedence over text."""
    if has_attachment:
        return ConversationInput.ATTACHMENT

    keyword = (text or "").strip().lower()
    if not keyword:
        return ConversationInput.EMPTY
    if keyword == FINISHED_KEYWORD:
        return ConversationInput.FINISHED
    if keyword == CONFIRM_KEYWORD:
        return ConversationInput.CONFIRM
    if keyword == CANCEL_KEYWORD:
        return ConversationInput.CANCEL
    return ConversationInput.TEXT


def transition(
    state: Optional[ConversationState],
    event: ConversationInput,
    has_content: bool = False
) -> Transition:
    """
    Pure transition function of the respondent state machine.

    Args:
        state: Current state, or None when no conversation exists
        event: Classified inbound event
        has_content: Whether text or attachments were collected

    Returns:
        Transition to apply
    """
    if state is None or state.is_terminal:
        return Transition(ConversationState.COLLECTING, (Effect.START,))

    if state == ConversationState.COLLECTING:
        if event == ConversationInput.ATTACHMENT:
            return Transition(ConversationState.COLLECTING, (Effect.STORE_ATTACHMENT,))
        if event == ConversationInput.FINISHED:
            if has_content:
                return Transition(ConversationState.AWAITING_CONFIRMATION, (Effect.SUMMARIZE,))
            return Transition(ConversationState.COLLECTING, (Effect.REJECT_EMPTY,))
        if event == ConversationInput.EMPTY:
            return Transition(ConversationState.COLLECTING)
        # "confirm" and "cancel" are plain text while collecting
        return Transition(ConversationState.COLLECTING, (Effect.APPEND_TEXT,))

    if state == ConversationState.AWAITING_CONFIRMATION:
        if event == ConversationInput.CONFIRM:
            return Transition(ConversationState.COMPLETED, (Effect.ASSEMBLE,))
        if event == ConversationInput.CANCEL:
            return Transition(ConversationState.COLLECTING, (Effect.CLEAR,))
        return Transition(ConversationState.AWAITING_CONFIRMATION, (Effect.REPROMPT,))

    raise ValueError(f"Unhandled conversation state: {state}")


EffectHandler = Callable[[ConversationRecord, InboundMessage], Awaitable[bool]]


class ConversationEngine:
    """Drives respondent conversations and executes transition effects."""

    def __init__(
        self,
        transport: BaseTransport,
        correlation: CorrelationIndex,
        assembler: ReportAssembler,
        clock=None
    ):
        """
        Initialize the engine.

        Args:
            transport: Messaging transport for replies and downloads
            correlation: Index used to link new conversations to inquiries
            assembler: Report assembler invoked on confirmation
            clock: Time source (defaults to the system clock)
        """
        self.transport = transport
        self.correlation = correlation
        self.assembler = assembler
        self.clock = clock or SystemClock()
        self.conversations: Dict[str, ConversationRecord] = {}
        self.logger = get_app_logger()
        self._handlers: Dict[Effect, EffectHandler] = {
            Effect.START: self._welcome,
            Effect.STORE_ATTACHMENT: self._store_attachment,
            Effect.APPEND_TEXT: self._append_text,
            Effect.SUMMARIZE: self._summarize,
            Effect.REJECT_EMPTY: self._reject_empty,
            Effect.ASSEMBLE: self._assemble,
            Effect.CLEAR: self._clear,
            Effect.REPROMPT: self._reprompt,
        }

    def get(self, identity: str) -> Optional[ConversationRecord]:
        return self.conversations.get(identity)

    def list_all(self) -> List[ConversationRecord]:
        return list(self.conversations.values())

    async def handle(self, message: InboundMessage) -> ConversationRecord:
        """
        Process one inbound respondent message.

        Callers must serialize calls per sender identity.

        Args:
            message: Inbound message from a respondent

        Returns:
            The conversation record after the event
        """
        identity = message.sender
        record = self.conversations.get(identity)
        active = record is not None and record.is_active

        event = classify(message.text, message.has_media)
        step = transition(
            record.state if active else None,
            event,
            record.has_content if active else False
        )
        self.logger.debug(
            f"Conversation {identity}: {record.state.value if active else 'absent'} "
            f"x {event.value} -> {step.next_state.value}"
        )

        if Effect.START in step.effects:
            record = self._open(identity, message.text)

        for effect in step.effects:
            if not await self._handlers[effect](record, message):
                return record

        record.state = step.next_state
        return record

    def _open(self, identity: str, text: str) -> ConversationRecord:
        linked = self.correlation.detect(text)
        record = ConversationRecord(
            identity=identity,
            started_at=self.clock.now(),
            linked_topic=linked
        )
        self.conversations[identity] = record
        self.logger.info(
            f"New conversation with {identity}"
            + (f" linked to inquiry #{linked.sequence_number} ({linked.topic})" if linked else "")
        )
        return record

    async def _reply(self, identity: str, text: str) -> None:
        if not await self.transport.send_text(identity, text):
            self.logger.warning(f"Reply to {identity} was not delivered")

    async def _welcome(self, record: ConversationRecord, message: InboundMessage) -> bool:
        welcome = "Thanks for replying privately from the group!\n\n"
        if record.linked_topic:
            welcome += f"📋 *Query you're responding to:*\n\"{record.linked_topic.body}\"\n\n"
        welcome += INSTRUCTIONS
        await self._reply(record.identity, welcome)
        return True

    async def _store_attachment(self, record: ConversationRecord, message: InboundMessage) -> bool:
        try:
            media = await self.transport.download_media(message)
            payload = media.to_bytes() if media else None
        except Exception as e:
            self.logger.error(f"Error processing media from {record.identity}: {e}")
            payload = None

        if not payload:
            await self._reply(record.identity, DOWNLOAD_FAILED)
            return False

        count = record.add_attachment(AttachmentRecord(
            payload=payload,
            mimetype=media.mimetype,
            caption=message.text,
            received_at=self.clock.now()
        ))
        self.logger.info(f"Image saved for {record.identity}. Total images: {count}")
        await self._reply(record.identity, ATTACHMENT_ACK.format(count=count))
        return True

    async def _append_text(self, record: ConversationRecord, message: InboundMessage) -> bool:
        record.append_text(message.text)
        self.logger.info(f"Text added for {record.identity}. Current response length: {len(record.text)}")
        await self._reply(record.identity, TEXT_ACK)
        return True

    async def _summarize(self, record: ConversationRecord, message: InboundMessage) -> bool:
        await self._reply(record.identity, SUMMARY.format(
            text="Yes" if record.text else "None",
            count=len(record.attachments)
        ))
        return True

    async def _reject_empty(self, record: ConversationRecord, message: InboundMessage) -> bool:
        await self._reply(record.identity, NOTHING_COLLECTED)
        return True

    async def _assemble(self, record: ConversationRecord, message: InboundMessage) -> bool:
        try:
            await self.assembler.assemble(record)
        except AssemblyFailure as e:
            self.logger.error(f"Error in report assembly for {record.identity}: {e}")
            await self._reply(record.identity, ASSEMBLY_FAILED)
            return False
        return True

    async def _clear(self, record: ConversationRecord, message: InboundMessage) -> bool:
        record.clear()
        await self._reply(record.identity, CLEARED)
        return True

    async def _reprompt(self, record: ConversationRecord, message: InboundMessage) -> bool:
        await self._reply(record.identity, REPROMPT)
        return True

    def expire_stale(
        self,
        now: datetime,
        ttl: timedelta,
        skip: Optional[Callable[[str], bool]] = None
    ) -> List[str]:
        """
        Mark open conversations older than ``ttl`` as expired, keeping their data.

        Args:
            now: Current time
            ttl: Maximum conversation age
            skip: Predicate for identities that must not be touched (events in flight)

        Returns:
            Expired identities
        """
        expired = []
        for identity, record in self.conversations.items():
            if not record.is_active or now - record.started_at <= ttl:
                continue
            if skip and skip(identity):
                self.logger.debug(f"Skipping expiry of {identity}: event in flight")
                continue
            record.state = ConversationState.EXPIRED
            expired.append(identity)
            self.logger.info(f"Cleaning up expired conversation from {identity}")
        return expired

    def reset(self) -> None:
        self.conversations.clear()
