"""Inquiry ledger - authoritative record of every inquiry issued."""

from datetime import datetime
from typing import Dict, List, Optional

from ..errors import NotFound
from ..models.inquiry import InquiryRecord, InquiryStatus
from ..utils.logger import get_app_logger


class InquiryLedger:
    """Sequence-numbered inquiries; records are closed, never removed."""

    def __init__(self, counter: int = 0, records: Optional[Dict[int, InquiryRecord]] = None):
        self.counter = counter
        self._records: Dict[int, InquiryRecord] = dict(records or {})
        self.logger = get_app_logger()

        # Never hand out a number already present in the ledger
        if self._records:
            self.counter = max(self.counter, max(self._records))

    def issue(self, topic: str, body: str, issued_at: datetime) -> InquiryRecord:
        """
        Allocate the next sequence number and record an active inquiry.

        Args:
            topic: Configured topic keyword
            body: Original requester text
            issued_at: Issuance timestamp

        Returns:
            The new inquiry record
        """
        self.counter += 1
        record = InquiryRecord(
            sequence_number=self.counter,
            topic=topic,
            body=body,
            issued_at=issued_at,
            status=InquiryStatus.ACTIVE
        )
        self._records[record.sequence_number] = record
        self.logger.info(f"New inquiry #{record.sequence_number} for '{topic}': \"{body}\"")
        return record

    def close(self, sequence_number: int) -> InquiryRecord:
        """
        Transition an inquiry to closed.

        Args:
            sequence_number: Inquiry number

        Returns:
            The closed record (already-closed records are returned unchanged)

        Raises:
            NotFound: If the sequence number is unknown
        """
        record = self._records.get(sequence_number)
        if record is None:
            raise NotFound(sequence_number)

        if record.status != InquiryStatus.CLOSED:
            record.status = InquiryStatus.CLOSED
            self.logger.info(f"Inquiry #{sequence_number} ({record.topic}) closed")
        return record

    def get(self, sequence_number: int) -> Optional[InquiryRecord]:
        return self._records.get(sequence_number)

    def list_all(self, status: Optional[InquiryStatus] = None) -> List[InquiryRecord]:
        records = sorted(self._records.values(), key=lambda r: r.sequence_number)
        if status is not None:
            records = [r for r in records if r.status == status]
        return records

    def snapshot(self) -> Dict[int, InquiryRecord]:
        return dict(self._records)

    def reset(self) -> None:
        self.counter = 0
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
