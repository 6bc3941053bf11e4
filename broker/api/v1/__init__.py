"""API v1 package."""

from .messages import router as messages_router
from .inquiries import router as inquiries_router
from .conversations import router as conversations_router

__all__ = ["messages_router", "inquiries_router", "conversations_router"]
