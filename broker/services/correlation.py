"""Correlation index - most recent inquiry per topic keyword."""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from ..models.inquiry import RecentTopicEntry
from ..utils.logger import get_app_logger


class CorrelationIndex:
    """
    Maps a topic keyword to the latest inquiry issued for it.

    Used to guess which inquiry an inbound reply from an unknown
    counterparty answers.
    """

    def __init__(self, entries: Optional[Dict[str, RecentTopicEntry]] = None):
        self._entries: Dict[str, RecentTopicEntry] = dict(entries or {})
        self.logger = get_app_logger()

    def record(self, topic: str, body: str, issued_at: datetime, sequence_number: int) -> RecentTopicEntry:
        """Create or overwrite the entry for ``topic``."""
        entry = RecentTopicEntry(
            topic=topic,
            body=body,
            issued_at=issued_at,
            sequence_number=sequence_number
        )
        self._entries[topic] = entry
        return entry

    def detect(self, message_text: str) -> Optional[RecentTopicEntry]:
        """
        Best-effort match of a reply to an outstanding inquiry.

        A keyword contained in the text wins (longest keyword first, then the
        most recent issuance). Otherwise the most recently issued entry is
        returned. None only when the index is empty.

        Args:
            message_text: Inbound message text

        Returns:
            Matching entry or None
        """
        if not self._entries:
            return None

        haystack = (message_text or "").upper()
        matches = [
            entry for keyword, entry in self._entries.items()
            if haystack and keyword.upper() in haystack
        ]
        if matches:
            return max(matches, key=lambda e: (len(e.topic), e.issued_at))

        return max(self._entries.values(), key=lambda e: e.issued_at)

    def prune(self, now: datetime, retention: timedelta) -> List[str]:
        """
        Remove entries older than ``retention``.

        Returns:
            Removed topic keywords
        """
        stale = [
            topic for topic, entry in self._entries.items()
            if now - entry.issued_at > retention
        ]
        for topic in stale:
            del self._entries[topic]
            self.logger.info(f"Cleaning up old query for {topic}")
        return stale

    def get(self, topic: str) -> Optional[RecentTopicEntry]:
        return self._entries.get(topic)

    def snapshot(self) -> Dict[str, RecentTopicEntry]:
        return dict(self._entries)

    def reset(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
