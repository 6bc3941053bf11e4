"""HTTP API response models."""

from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .conversation import ConversationRecord
from .inquiry import InquiryRecord, RecentTopicEntry


class RouteResponse(BaseModel):
    """Result of delivering one inbound message to the broker."""

    outcome: str = Field(description="Path taken: requester, respondent or ignored")


class InquiryResponse(BaseModel):
    """Response model for an inquiry."""

    sequence_number: int = Field(description="Inquiry number")
    topic: str = Field(description="Topic keyword")
    body: str = Field(description="Original requester text")
    issued_at: datetime = Field(description="Issuance timestamp")
    status: str = Field(description="active or closed")
    responses: List[str] = Field(default_factory=list, description="Recorded responses")

    @classmethod
    def from_record(cls, record: InquiryRecord) -> "InquiryResponse":
        return cls(
            sequence_number=record.sequence_number,
            topic=record.topic,
            body=record.body,
            issued_at=record.issued_at,
            status=record.status.value,
            responses=list(record.responses)
        )


class InquiryListResponse(BaseModel):
    """Response model for listing inquiries."""

    inquiries: List[InquiryResponse] = Field(description="Inquiries ordered by number")
    counter: int = Field(description="Last issued sequence number")
    total: int = Field(description="Number of inquiries returned")


class TopicResponse(BaseModel):
    """Response model for one configured topic."""

    keyword: str = Field(description="Topic keyword")
    destinations: List[str] = Field(description="Destination channels in dispatch order")


class TopicListResponse(BaseModel):
    """Response model for listing topics."""

    topics: List[TopicResponse] = Field(description="Configured topics")
    total: int = Field(description="Number of topics")


class LinkedTopicResponse(BaseModel):
    """Inquiry a conversation was correlated with."""

    topic: str = Field(description="Topic keyword")
    body: str = Field(description="Inquiry text")
    sequence_number: int = Field(description="Inquiry number")
    issued_at: datetime = Field(description="Issuance timestamp")

    @classmethod
    def from_entry(cls, entry: RecentTopicEntry) -> "LinkedTopicResponse":
        return cls(
            topic=entry.topic,
            body=entry.body,
            sequence_number=entry.sequence_number,
            issued_at=entry.issued_at
        )


class ConversationSummaryResponse(BaseModel):
    """Conversation summary; attachment payloads are never exposed."""

    identity: str = Field(description="Respondent identity")
    state: str = Field(description="Conversation state")
    started_at: datetime = Field(description="Start timestamp")
    text_length: int = Field(description="Collected text length in characters")
    attachment_count: int = Field(description="Number of collected attachments")
    attachment_types: List[str] = Field(default_factory=list, description="Attachment media types in order")
    linked_topic: Optional[LinkedTopicResponse] = Field(None, description="Correlated inquiry")

    @classmethod
    def from_record(cls, record: ConversationRecord) -> "ConversationSummaryResponse":
        return cls(
            identity=record.identity,
            state=record.state.value,
            started_at=record.started_at,
            text_length=len(record.text),
            attachment_count=len(record.attachments),
            attachment_types=[a.mimetype for a in record.attachments],
            linked_topic=LinkedTopicResponse.from_entry(record.linked_topic) if record.linked_topic else None
        )


class ConversationListResponse(BaseModel):
    """Response model for listing conversations."""

    conversations: List[ConversationSummaryResponse] = Field(description="Conversation summaries")
    total: int = Field(description="Number of conversations")
    by_state: Dict[str, int] = Field(default_factory=dict, description="Count per state")


class GroupResponse(BaseModel):
    """A group chat visible to the transport account."""

    id: str = Field(description="Group identifier")
    name: str = Field(description="Group display name")


class GroupListResponse(BaseModel):
    """Response model for listing groups."""

    groups: List[GroupResponse] = Field(description="Visible groups")
    total: int = Field(description="Number of groups")
