"""Report assembler - turns a confirmed conversation into requester reports."""

import asyncio
import mimetypes
from dataclasses import dataclass
from typing import Optional

from ..errors import AssemblyFailure, NormalizationFailure
from ..models.conversation import AttachmentRecord, ConversationRecord
from ..models.message import MediaPayload
from ..transports.base import BaseTransport
from ..utils.clock import SystemClock
from ..utils.logger import get_app_logger
from .normalizer import BaseNormalizer


RESPONDENT_ACK = "✅ Perfect! Your response has been sent to the buyer. Thank you for your submission!"


def display_identity(identity: str) -> str:
    """Render a transport identity as a phone-style handle."""
    return f"+{identity.split('@', 1)[0]}"


@dataclass
class AssemblyResult:
    """What was delivered for one conversation."""

    attachments_sent: int
    attachments_failed: int
    normalized: bool
    report_text: str


class ReportAssembler:
    """Forwards attachments and a final text report to the requester."""

    def __init__(
        self,
        transport: BaseTransport,
        owner_id: str,
        normalizer: Optional[BaseNormalizer] = None,
        send_delay: float = 1.5,
        clock=None
    ):
        """
        Initialize the assembler.

        Args:
            transport: Messaging transport
            owner_id: Requester identity receiving reports
            normalizer: Optional text normalizer
            send_delay: Seconds to wait after each forwarded attachment
            clock: Time source (defaults to the system clock)
        """
        self.transport = transport
        self.owner_id = owner_id
        self.normalizer = normalizer
        self.send_delay = send_delay
        self.clock = clock or SystemClock()
        self.logger = get_app_logger()

    def attachment_caption(self, conversation: ConversationRecord, index: int, attachment: AttachmentRecord) -> str:
        total = len(conversation.attachments)
        caption = f"📸 Image {index}/{total} from {display_identity(conversation.identity)}\n"
        if conversation.linked_topic:
            caption += f"📋 Reply to: \"{conversation.linked_topic.body}\"\n"
        caption += "(seller replied privately from group)"
        if attachment.caption:
            caption += f"\n📝 Caption: {attachment.caption}"
        return caption

    async def _forward_attachments(self, conversation: ConversationRecord) -> int:
        sent = 0
        total = len(conversation.attachments)
        for index, attachment in enumerate(conversation.attachments, start=1):
            try:
                extension = mimetypes.guess_extension(attachment.mimetype) or ".bin"
                media = MediaPayload.from_bytes(
                    attachment.payload,
                    attachment.mimetype,
                    filename=f"image_{index}{extension}"
                )
                caption = self.attachment_caption(conversation, index, attachment)
                if await self.transport.send_media(self.owner_id, media, caption=caption):
                    sent += 1
                    self.logger.info(f"Image {index}/{total} sent to owner")
                else:
                    self.logger.error(f"Failed to send image {index}/{total} to owner")
            except Exception as e:
                self.logger.error(f"Failed to send image {index}/{total}: {e}")

            if self.send_delay > 0:
                await asyncio.sleep(self.send_delay)
        return sent

    async def _normalize(self, raw_text: str) -> Optional[str]:
        if not raw_text or self.normalizer is None:
            return None
        try:
            return await self.normalizer.normalize(raw_text)
        except NormalizationFailure as e:
            self.logger.warning(f"AI processing failed, using raw text: {e}")
            return None
        except Exception as e:
            self.logger.error(f"Unexpected normalizer error, using raw text: {e}", exc_info=True)
            return None

    def build_report(self, conversation: ConversationRecord, processed_text: str) -> str:
        report = f"SELLER RESPONSE\n\nFrom: {display_identity(conversation.identity)}\n\n"
        if conversation.linked_topic:
            report += f"📋 *Original Query:*\n\"{conversation.linked_topic.body}\"\n\n"
        completed_at = self.clock.now().strftime("%Y-%m-%d %H:%M:%S %Z")
        report += (
            f"Product Information\n\n{processed_text}\n\n"
            f"---\nOriginal Message:\n\"{conversation.text or 'No text provided'}\"\n\n"
            f"Images: {len(conversation.attachments)} photo(s)\n"
            f"Timestamp: {completed_at}"
        )
        return report

    async def assemble(self, conversation: ConversationRecord) -> AssemblyResult:
        """
        Deliver a confirmed conversation to the requester.

        Args:
            conversation: Conversation awaiting confirmation

        Returns:
            AssemblyResult

        Raises:
            AssemblyFailure: If the report could not be produced or delivered
        """
        respondent = display_identity(conversation.identity)
        self.logger.info(
            f"Processing final response from {respondent}: "
            f"{len(conversation.attachments)} images, {len(conversation.text)} chars text"
        )

        try:
            sent = 0
            if conversation.attachments:
                self.logger.info(f"Forwarding {len(conversation.attachments)} images to owner...")
                sent = await self._forward_attachments(conversation)

            normalized = await self._normalize(conversation.text)
            processed_text = normalized or conversation.text or "No text details provided"

            report = self.build_report(conversation, processed_text)
            if not await self.transport.send_text(self.owner_id, report):
                raise AssemblyFailure(f"Report for {respondent} could not be delivered to the requester")

            if not await self.transport.send_text(conversation.identity, RESPONDENT_ACK):
                self.logger.warning(f"Acknowledgment to {respondent} could not be delivered")
        except AssemblyFailure:
            raise
        except Exception as e:
            raise AssemblyFailure(f"Error assembling report for {respondent}: {e}") from e

        self.logger.info(
            f"Successfully processed response from {respondent} - "
            f"{sent} images + text forwarded to owner"
        )
        return AssemblyResult(
            attachments_sent=sent,
            attachments_failed=len(conversation.attachments) - sent,
            normalized=normalized is not None,
            report_text=report
        )
