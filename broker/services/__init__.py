"""Broker services."""

from .assembler import ReportAssembler
from .broker import Broker
from .conversation_engine import ConversationEngine
from .correlation import CorrelationIndex
from .dispatcher import DispatchReport, Dispatcher
from .housekeeping import HousekeepingSweep
from .inquiry_desk import InquiryDesk
from .ledger import InquiryLedger
from .normalizer import BaseNormalizer, GeminiNormalizer
from .router import CommandRouter, RouteOutcome
from .state_store import BaseStateStore, DuckDBStateStore, JsonFileStateStore
from .topics import TopicRegistry

__all__ = [
    "Broker",
    "BaseNormalizer",
    "BaseStateStore",
    "CommandRouter",
    "ConversationEngine",
    "CorrelationIndex",
    "DispatchReport",
    "Dispatcher",
    "DuckDBStateStore",
    "GeminiNormalizer",
    "HousekeepingSweep",
    "InquiryDesk",
    "InquiryLedger",
    "JsonFileStateStore",
    "ReportAssembler",
    "RouteOutcome",
    "TopicRegistry",
]
