"""Messaging transports."""

from .base import BaseTransport
from .http_gateway import HttpGatewayTransport

__all__ = ["BaseTransport", "HttpGatewayTransport"]
