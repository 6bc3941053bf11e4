"""Inquiry desk - requester-side issuance, closing and persistence."""

from typing import Tuple

from ..errors import InvalidCommand, PersistenceFailure
from ..models.inquiry import InquiryRecord, StateSnapshot
from ..utils.clock import SystemClock
from ..utils.logger import get_app_logger
from .correlation import CorrelationIndex
from .dispatcher import DispatchReport, Dispatcher
from .ledger import InquiryLedger
from .state_store import BaseStateStore
from .topics import TopicRegistry


class InquiryDesk:
    """Owns the ledger and correlation index and keeps them persisted."""

    def __init__(
        self,
        ledger: InquiryLedger,
        correlation: CorrelationIndex,
        topics: TopicRegistry,
        dispatcher: Dispatcher,
        store: BaseStateStore,
        clock=None
    ):
        self.ledger = ledger
        self.correlation = correlation
        self.topics = topics
        self.dispatcher = dispatcher
        self.store = store
        self.clock = clock or SystemClock()
        self.logger = get_app_logger()

    def load(self) -> None:
        """Restore ledger and correlation index from the store; unreadable state starts empty."""
        try:
            snapshot = self.store.load()
        except PersistenceFailure as e:
            self.logger.error(f"Error loading persisted state, starting fresh: {e}")
            snapshot = StateSnapshot()

        self.ledger = InquiryLedger(snapshot.counter, snapshot.inquiries)
        self.correlation.reset()
        for entry in snapshot.recent_topics.values():
            self.correlation.record(entry.topic, entry.body, entry.issued_at, entry.sequence_number)

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            counter=self.ledger.counter,
            inquiries=self.ledger.snapshot(),
            recent_topics=self.correlation.snapshot()
        )

    def persist(self) -> bool:
        """
        Write current state to the store.

        Failures are logged and never roll back memory.

        Returns:
            True if the write succeeded
        """
        try:
            self.store.save(self.snapshot())
            return True
        except PersistenceFailure as e:
            self.logger.error(f"Error saving state: {e}")
            return False

    async def issue_inquiry(self, topic: str, body: str) -> Tuple[InquiryRecord, DispatchReport]:
        """
        Issue an inquiry and broadcast it to the topic's destinations.

        Args:
            topic: Configured topic keyword
            body: Requester's original text

        Returns:
            Tuple of (inquiry record, dispatch report)

        Raises:
            InvalidCommand: If the topic is not configured
        """
        if not self.topics.is_configured(topic):
            raise InvalidCommand(f"Unknown topic: {topic}")

        issued_at = self.clock.now()
        record = self.ledger.issue(topic, body, issued_at)
        self.correlation.record(topic, body, issued_at, record.sequence_number)
        self.persist()

        report = await self.dispatcher.dispatch(topic, body, self.topics.destinations(topic))
        return record, report

    def close_inquiry(self, sequence_number: int) -> InquiryRecord:
        """
        Close an inquiry.

        Raises:
            NotFound: If the sequence number is unknown
        """
        record = self.ledger.close(sequence_number)
        self.persist()
        return record

    def reset(self) -> None:
        self.ledger.reset()
        self.correlation.reset()
        self.persist()
        self.logger.info("Inquiry ledger, counter and recent topics reset")
