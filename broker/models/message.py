"""Transport message models."""

import base64
from typing import Optional
from pydantic import BaseModel, Field


class MediaPayload(BaseModel):
    """Binary attachment as exchanged with the messaging gateway."""

    mimetype: str = Field(description="Declared media type")
    data: str = Field(description="Base64-encoded payload")
    filename: Optional[str] = Field(None, description="Optional file name")

    @classmethod
    def from_bytes(cls, payload: bytes, mimetype: str, filename: Optional[str] = None) -> "MediaPayload":
        return cls(
            mimetype=mimetype,
            data=base64.b64encode(payload).decode("ascii"),
            filename=filename
        )

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.data)


class InboundMessage(BaseModel):
    """Inbound event delivered by the messaging gateway."""

    sender: str = Field(default="", description="Stable sender identity")
    body: str = Field(default="", description="Message text")
    has_media: bool = Field(default=False, description="Whether the message carries an attachment")
    message_id: Optional[str] = Field(None, description="Gateway message ID, used to download media")
    media: Optional[MediaPayload] = Field(None, description="Inline attachment, when the gateway pushes it")

    @property
    def text(self) -> str:
        return self.body.strip() if self.body else ""


class GroupInfo(BaseModel):
    """A group chat visible to the transport account."""

    id: str = Field(description="Group identifier")
    name: str = Field(default="", description="Group display name")
