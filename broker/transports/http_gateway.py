"""Transport backed by an HTTP messaging gateway."""

from typing import Any, Dict, List, Optional

import httpx

from .base import BaseTransport
from ..models.message import GroupInfo, InboundMessage, MediaPayload
from ..utils.logger import get_app_logger


class HttpGatewayTransport(BaseTransport):
    """
    Talks to a messaging gateway exposing a small REST API:

        POST /messages          {"to", "text"}
        POST /media             {"to", "mimetype", "data", "filename", "caption"}
        GET  /media/{message_id} -> {"mimetype", "data"}
        GET  /groups            -> [{"id", "name"}]

    Inbound messages are pushed by the gateway to the broker webhook.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the gateway transport.

        Args:
            base_url: Gateway base URL
            token: Optional bearer token
            timeout: Request timeout in seconds
            client: Optional pre-built client (used by tests)
        """
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout
        )
        self.logger = get_app_logger()

    async def _post(self, path: str, payload: Dict[str, Any], to: str) -> bool:
        try:
            self.logger.debug(f"Attempting to send message to: {to}")
            response = await self.client.post(path, json=payload)
            response.raise_for_status()
            self.logger.debug(f"Message sent successfully to: {to}")
            return True
        except httpx.HTTPError as e:
            self.logger.error(f"Failed to send message to {to}: {e}")
            return False

    async def send_text(self, to: str, text: str) -> bool:
        return await self._post("/messages", {"to": to, "text": text}, to)

    async def send_media(self, to: str, media: MediaPayload, caption: str = "") -> bool:
        payload = {
            "to": to,
            "mimetype": media.mimetype,
            "data": media.data,
            "filename": media.filename,
            "caption": caption
        }
        return await self._post("/media", payload, to)

    async def download_media(self, message: InboundMessage) -> Optional[MediaPayload]:
        if message.media is not None:
            return message.media

        if not message.message_id:
            self.logger.error(f"Cannot download media from {message.sender}: no message_id")
            return None

        try:
            response = await self.client.get(f"/media/{message.message_id}")
            response.raise_for_status()
            return MediaPayload(**response.json())
        except (httpx.HTTPError, ValueError, TypeError) as e:
            self.logger.error(f"Failed to download media {message.message_id}: {e}")
            return None

    async def list_groups(self) -> List[GroupInfo]:
        response = await self.client.get("/groups")
        response.raise_for_status()
        return [GroupInfo(**group) for group in response.json()]

    async def close(self) -> None:
        await self.client.aclose()
