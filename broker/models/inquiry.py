"""Inquiry ledger and correlation index records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from ..utils.clock import ensure_utc


class InquiryStatus(str, Enum):
    """Inquiry lifecycle status."""
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class InquiryRecord:
    """One broadcast request for offers, identified by its sequence number."""

    sequence_number: int
    topic: str
    body: str
    issued_at: datetime
    status: InquiryStatus = InquiryStatus.ACTIVE
    responses: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sequence_number": self.sequence_number,
            "topic": self.topic,
            "body": self.body,
            "issued_at": self.issued_at.isoformat(),
            "status": self.status.value,
            "responses": list(self.responses)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InquiryRecord":
        return cls(
            sequence_number=int(data["sequence_number"]),
            topic=data["topic"],
            body=data.get("body", ""),
            issued_at=ensure_utc(datetime.fromisoformat(data["issued_at"])),
            status=InquiryStatus(data.get("status", InquiryStatus.ACTIVE.value)),
            responses=list(data.get("responses") or [])
        )


@dataclass
class RecentTopicEntry:
    """Latest inquiry issued for a topic keyword."""

    topic: str
    body: str
    issued_at: datetime
    sequence_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic": self.topic,
            "body": self.body,
            "issued_at": self.issued_at.isoformat(),
            "sequence_number": self.sequence_number
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecentTopicEntry":
        return cls(
            topic=data["topic"],
            body=data.get("body", ""),
            issued_at=ensure_utc(datetime.fromisoformat(data["issued_at"])),
            sequence_number=int(data["sequence_number"])
        )


@dataclass
class StateSnapshot:
    """Everything the durable store persists."""

    counter: int = 0
    inquiries: Dict[int, InquiryRecord] = field(default_factory=dict)
    recent_topics: Dict[str, RecentTopicEntry] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "counter": self.counter,
            "inquiries": {str(n): record.to_dict() for n, record in self.inquiries.items()},
            "recent_topics": {topic: entry.to_dict() for topic, entry in self.recent_topics.items()}
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StateSnapshot":
        inquiries = {}
        for record_data in (data.get("inquiries") or {}).values():
            record = InquiryRecord.from_dict(record_data)
            inquiries[record.sequence_number] = record

        recent_topics = {}
        for entry_data in (data.get("recent_topics") or {}).values():
            entry = RecentTopicEntry.from_dict(entry_data)
            recent_topics[entry.topic] = entry

        return cls(
            counter=int(data.get("counter") or 0),
            inquiries=inquiries,
            recent_topics=recent_topics
        )
