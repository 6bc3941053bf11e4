"""Domain records and API models."""

from .conversation import AttachmentRecord, ConversationRecord, ConversationState
from .inquiry import InquiryRecord, InquiryStatus, RecentTopicEntry, StateSnapshot
from .message import GroupInfo, InboundMessage, MediaPayload

__all__ = [
    "AttachmentRecord",
    "ConversationRecord",
    "ConversationState",
    "GroupInfo",
    "InboundMessage",
    "InquiryRecord",
    "InquiryStatus",
    "MediaPayload",
    "RecentTopicEntry",
    "StateSnapshot",
]
