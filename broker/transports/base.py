"""Base transport for messaging channel integration."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.message import GroupInfo, InboundMessage, MediaPayload


class BaseTransport(ABC):
    """
    Abstract bidirectional messaging channel.

    Send operations report failure by returning False instead of raising, so
    callers can count per-destination outcomes.
    """

    @abstractmethod
    async def send_text(self, to: str, text: str) -> bool:
        """
        Send a text message.

        Args:
            to: Destination identity (user or group)
            text: Message text

        Returns:
            True if the message was accepted, False otherwise
        """
        pass

    @abstractmethod
    async def send_media(self, to: str, media: MediaPayload, caption: str = "") -> bool:
        """
        Send a media message.

        Args:
            to: Destination identity
            media: Attachment to send
            caption: Optional caption

        Returns:
            True if the message was accepted, False otherwise
        """
        pass

    @abstractmethod
    async def download_media(self, message: InboundMessage) -> Optional[MediaPayload]:
        """
        Fetch the attachment carried by an inbound message.

        Args:
            message: Inbound message with ``has_media`` set

        Returns:
            Media payload, or None if it could not be retrieved
        """
        pass

    @abstractmethod
    async def list_groups(self) -> List[GroupInfo]:
        """List group chats visible to the account."""
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass
