"""In-memory fakes for the messaging transport, normalizer and clock."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Set

import httpx

from broker.errors import NormalizationFailure
from broker.models.message import GroupInfo, InboundMessage, MediaPayload
from broker.services.normalizer import BaseNormalizer
from broker.transports.base import BaseTransport


OWNER = "15550000000@c.us"
SELLER = "15551112222@c.us"
GROUP_1 = "g1@g.us"
GROUP_2 = "g2@g.us"


class FakeClock:
    """Virtual clock advanced by tests."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class FakeTransport(BaseTransport):
    """In-memory transport recording every outbound message."""

    def __init__(self):
        self.texts: List[tuple] = []
        self.media: List[tuple] = []
        self.failing: Set[str] = set()
        self.fail_downloads = False
        self.fail_media = False
        self.groups: List[GroupInfo] = []
        self.closed = False

    async def send_text(self, to: str, text: str) -> bool:
        if to in self.failing:
            return False
        self.texts.append((to, text))
        return True

    async def send_media(self, to: str, media: MediaPayload, caption: str = "") -> bool:
        if to in self.failing or self.fail_media:
            return False
        self.media.append((to, media, caption))
        return True

    async def download_media(self, message: InboundMessage) -> Optional[MediaPayload]:
        if self.fail_downloads:
            return None
        return message.media

    async def list_groups(self) -> List[GroupInfo]:
        return list(self.groups)

    async def close(self) -> None:
        self.closed = True

    def texts_to(self, to: str) -> List[str]:
        return [text for dest, text in self.texts if dest == to]


class FakeNormalizer(BaseNormalizer):
    """Normalizer returning a fixed prefix plus the input."""

    def __init__(self):
        self.calls: List[str] = []

    async def normalize(self, raw_text: str) -> str:
        self.calls.append(raw_text)
        return f"Price: {raw_text}"


class FailingNormalizer(BaseNormalizer):
    """Normalizer that always fails."""

    async def normalize(self, raw_text: str) -> str:
        raise NormalizationFailure("model unavailable")


class CrashingNormalizer(BaseNormalizer):
    """Normalizer that breaks with an unexpected error type."""

    async def normalize(self, raw_text: str) -> str:
        raise RuntimeError("boom")


def text_message(sender: str, body: str) -> InboundMessage:
    return InboundMessage(sender=sender, body=body)


def image_message(sender: str, caption: str = "", payload: bytes = b"\x89PNG-data") -> InboundMessage:
    return InboundMessage(
        sender=sender,
        body=caption,
        has_media=True,
        message_id="msg-1",
        media=MediaPayload.from_bytes(payload, "image/png")
    )




def null_text_handler(request: httpx.Request) -> httpx.Response:
    """Generative Language reply whose candidate text is null."""
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": None}]}}]})
