"""Respondent conversation records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from .inquiry import RecentTopicEntry


class ConversationState(str, Enum):
    """Conversation state machine states."""
    COLLECTING = "collecting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMPLETED = "completed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self in (ConversationState.COMPLETED, ConversationState.EXPIRED)


@dataclass
class AttachmentRecord:
    """A binary attachment received from a respondent."""

    payload: bytes
    mimetype: str
    caption: str = ""
    received_at: Optional[datetime] = None


@dataclass
class ConversationRecord:
    """Per-respondent multi-turn exchange."""

    identity: str
    started_at: datetime
    state: ConversationState = ConversationState.COLLECTING
    text: str = ""
    attachments: List[AttachmentRecord] = field(default_factory=list)
    linked_topic: Optional[RecentTopicEntry] = None

    @property
    def is_active(self) -> bool:
        return not self.state.is_terminal

    @property
    def has_content(self) -> bool:
        return bool(self.text) or bool(self.attachments)

    def append_text(self, text: str) -> None:
        self.text = f"{self.text}\n\n{text}" if self.text else text

    def add_attachment(self, attachment: AttachmentRecord) -> int:
        self.attachments.append(attachment)
        return len(self.attachments)

    def clear(self) -> None:
        self.text = ""
        self.attachments = []
