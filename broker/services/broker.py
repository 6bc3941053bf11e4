"""Broker - wires the services together and owns their lifecycle."""

import asyncio
from typing import Optional

from ..models.message import InboundMessage
from ..transports.base import BaseTransport
from ..transports.http_gateway import HttpGatewayTransport
from ..utils.clock import SystemClock
from ..utils.keyed_lock import KeyedLock
from ..utils.logger import get_app_logger
from .assembler import ReportAssembler
from .conversation_engine import ConversationEngine
from .correlation import CorrelationIndex
from .dispatcher import Dispatcher
from .housekeeping import HousekeepingSweep
from .inquiry_desk import InquiryDesk
from .ledger import InquiryLedger
from .normalizer import BaseNormalizer, build_normalizer
from .router import CommandRouter, RouteOutcome
from .state_store import BaseStateStore, build_state_store
from .topics import TopicRegistry


class Broker:
    """Composition root for the inquiry broker."""

    def __init__(
        self,
        settings,
        transport: Optional[BaseTransport] = None,
        store: Optional[BaseStateStore] = None,
        topics: Optional[TopicRegistry] = None,
        normalizer: Optional[BaseNormalizer] = None,
        clock=None
    ):
        """
        Build every component from settings.

        Collaborators may be injected; anything not given is created from
        ``settings``.

        Args:
            settings: Application settings instance
            transport: Messaging transport
            store: Durable state store
            topics: Topic registry
            normalizer: Text normalizer
            clock: Time source
        """
        self.settings = settings
        self.logger = get_app_logger()
        self.clock = clock or SystemClock()

        self.transport = transport or HttpGatewayTransport(
            base_url=settings.gateway_base_url,
            token=settings.gateway_token,
            timeout=settings.gateway_timeout
        )
        self.store = store or build_state_store(settings)
        self.topics = topics or TopicRegistry.from_file(settings.topics_file)
        self.normalizer = normalizer if normalizer is not None else build_normalizer(settings)

        self.identity_locks = KeyedLock()
        self.state_lock = asyncio.Lock()

        self.correlation = CorrelationIndex()
        self.desk = InquiryDesk(
            ledger=InquiryLedger(),
            correlation=self.correlation,
            topics=self.topics,
            dispatcher=Dispatcher(self.transport),
            store=self.store,
            clock=self.clock
        )
        self.desk.load()

        self.assembler = ReportAssembler(
            transport=self.transport,
            owner_id=settings.owner_id,
            normalizer=self.normalizer,
            send_delay=settings.attachment_send_delay,
            clock=self.clock
        )
        self.engine = ConversationEngine(
            transport=self.transport,
            correlation=self.correlation,
            assembler=self.assembler,
            clock=self.clock
        )
        self.router = CommandRouter(
            transport=self.transport,
            desk=self.desk,
            engine=self.engine,
            identity_locks=self.identity_locks,
            state_lock=self.state_lock,
            owner_id=settings.owner_id,
            group_suffix=settings.group_suffix,
            ignored_senders=settings.get_ignored_senders(),
            topics_file=settings.topics_file
        )
        self.housekeeping = HousekeepingSweep(
            engine=self.engine,
            desk=self.desk,
            identity_locks=self.identity_locks,
            state_lock=self.state_lock,
            interval=settings.sweep_interval,
            conversation_ttl=settings.conversation_ttl,
            topic_retention=settings.topic_retention,
            clock=self.clock
        )

    @property
    def ledger(self) -> InquiryLedger:
        return self.desk.ledger

    async def handle(self, message: InboundMessage) -> RouteOutcome:
        return await self.router.route(message)

    def start(self) -> None:
        self.housekeeping.start()

    async def shutdown(self) -> None:
        """Stop housekeeping, flush state and release collaborators."""
        await self.housekeeping.stop()

        if self.desk.persist():
            self.logger.info("State flushed to store")

        self.store.close()
        if self.normalizer is not None:
            await self.normalizer.close()
        await self.transport.close()
