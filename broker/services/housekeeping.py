"""Housekeeping sweep - expires stale conversations and old topic entries."""

import asyncio
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from ..utils.clock import SystemClock
from ..utils.keyed_lock import KeyedLock
from ..utils.logger import get_app_logger
from .conversation_engine import ConversationEngine
from .inquiry_desk import InquiryDesk


@dataclass
class SweepResult:
    """What one sweep changed."""

    expired_conversations: List[str] = field(default_factory=list)
    pruned_topics: List[str] = field(default_factory=list)


class HousekeepingSweep:
    """Periodic cleanup task bound to the application lifespan."""

    def __init__(
        self,
        engine: ConversationEngine,
        desk: InquiryDesk,
        identity_locks: KeyedLock,
        state_lock: asyncio.Lock,
        interval: float = 900,
        conversation_ttl: float = 7200,
        topic_retention: float = 86400,
        clock=None
    ):
        """
        Initialize the sweep.

        Args:
            engine: Conversation engine whose records expire
            desk: Inquiry desk owning the correlation index and persistence
            identity_locks: Per-respondent locks; held identities are skipped
            state_lock: Global lock shared with the requester path
            interval: Seconds between sweeps
            conversation_ttl: Age in seconds after which open conversations expire
            topic_retention: Age in seconds after which recent topics are removed
            clock: Time source (defaults to the system clock)
        """
        self.engine = engine
        self.desk = desk
        self.identity_locks = identity_locks
        self.state_lock = state_lock
        self.interval = interval
        self.conversation_ttl = timedelta(seconds=conversation_ttl)
        self.topic_retention = timedelta(seconds=topic_retention)
        self.clock = clock or SystemClock()
        self.logger = get_app_logger()
        self._task: Optional[asyncio.Task] = None

    async def run_once(self) -> SweepResult:
        async with self.state_lock:
            now = self.clock.now()
            result = SweepResult(
                expired_conversations=self.engine.expire_stale(
                    now, self.conversation_ttl, skip=self.identity_locks.locked
                ),
                pruned_topics=self.desk.correlation.prune(now, self.topic_retention)
            )
            self.desk.persist()

        if result.expired_conversations or result.pruned_topics:
            self.logger.info(
                f"Housekeeping: expired {len(result.expired_conversations)} conversation(s), "
                f"pruned {len(result.pruned_topics)} topic(s)"
            )
        return result

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.run_once()
            except Exception as e:
                self.logger.error(f"Housekeeping sweep failed: {e}", exc_info=True)

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._loop())
        self.logger.info(f"Housekeeping started (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self.logger.info("Housekeeping stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
