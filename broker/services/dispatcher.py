"""Dispatcher - fans an inquiry out to a topic's destination channels."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from ..errors import DispatchFailure
from ..transports.base import BaseTransport
from ..utils.logger import get_app_logger


INQUIRY_TEMPLATE = "I am looking for : {body} if you have Reply Privately"


class DispatchCondition(str, Enum):
    """Outcome class of a fan-out."""
    OK = "ok"
    PARTIAL_FAILURE = "partial_failure"
    TOTAL_FAILURE = "total_failure"
    NO_DESTINATIONS = "no_destinations"


@dataclass
class DispatchReport:
    """Per-destination results of one fan-out."""

    topic: str
    results: Dict[str, bool] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def success_count(self) -> int:
        return sum(1 for ok in self.results.values() if ok)

    @property
    def failed(self) -> List[str]:
        return [dest for dest, ok in self.results.items() if not ok]

    @property
    def condition(self) -> DispatchCondition:
        if not self.results:
            return DispatchCondition.NO_DESTINATIONS
        if self.success_count == 0:
            return DispatchCondition.TOTAL_FAILURE
        if self.failed:
            return DispatchCondition.PARTIAL_FAILURE
        return DispatchCondition.OK

    @property
    def nothing_delivered(self) -> bool:
        """True when nothing reached any destination."""
        return self.condition in (DispatchCondition.TOTAL_FAILURE, DispatchCondition.NO_DESTINATIONS)


class Dispatcher:
    """Broadcasts an inquiry to every destination independently."""

    def __init__(self, transport: BaseTransport):
        self.transport = transport
        self.logger = get_app_logger()

    @staticmethod
    def format_inquiry(body: str) -> str:
        return INQUIRY_TEMPLATE.format(body=body)

    async def _send_one(self, destination: str, text: str) -> None:
        self.logger.info(f"Attempting to send to group: {destination}")
        if not await self.transport.send_text(destination, text):
            raise DispatchFailure(destination, "transport rejected the message")
        self.logger.info(f"Successfully sent to group: {destination}")

    async def dispatch(self, topic: str, body: str, destinations: List[str]) -> DispatchReport:
        """
        Send the inquiry template to every destination.

        Args:
            topic: Topic keyword
            body: Requester's original text
            destinations: Ordered destination identifiers

        Returns:
            DispatchReport with one result per destination
        """
        report = DispatchReport(topic=topic)
        if not destinations:
            self.logger.warning(f"No destinations configured for '{topic}'")
            return report

        text = self.format_inquiry(body)
        outcomes = await asyncio.gather(
            *(self._send_one(dest, text) for dest in destinations),
            return_exceptions=True
        )

        for destination, outcome in zip(destinations, outcomes):
            if isinstance(outcome, BaseException):
                report.results[destination] = False
                report.errors[destination] = str(outcome)
                self.logger.error(f"Failed to send to group: {destination} ({outcome})")
            else:
                report.results[destination] = True

        self.logger.info(
            f"Dispatch for '{topic}': {report.success_count}/{report.total} destinations "
            f"({report.condition.value})"
        )
        return report
