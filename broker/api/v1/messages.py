"""Inbound message webhook - V1."""

from fastapi import APIRouter, Depends, HTTPException

from ...models.api import RouteResponse
from ...models.message import InboundMessage
from ...services.broker import Broker
from ...utils.logger import get_app_logger

router = APIRouter(prefix="/api/v1", tags=["Messages"])

# Broker instance (set by main.py)
broker: Broker = None


def get_broker() -> Broker:
    """Dependency to get the broker."""
    if broker is None:
        raise HTTPException(status_code=500, detail="Broker not initialized")
    return broker


@router.post("/messages", response_model=RouteResponse)
async def receive_message(
    message: InboundMessage,
    broker: Broker = Depends(get_broker)
):
    """Deliver one inbound transport event to the broker."""
    try:
        outcome = await broker.handle(message)
    except Exception as e:
        logger = get_app_logger()
        logger.error(f"Unhandled error in message handler: {e}", exc_info=True)
        broker.desk.persist()
        raise HTTPException(status_code=500, detail="Failed to process message")

    return RouteResponse(outcome=outcome.value)
