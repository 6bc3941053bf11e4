"""Conversation and group REST API routes - V1."""

from collections import Counter

import httpx
from fastapi import APIRouter, Depends, HTTPException

from ...models.api import (
    ConversationListResponse,
    ConversationSummaryResponse,
    GroupListResponse,
    GroupResponse
)
from ...services.broker import Broker
from ...utils.logger import get_app_logger

router = APIRouter(prefix="/api/v1", tags=["Conversations"])

# Broker instance (set by main.py)
broker: Broker = None


def get_broker() -> Broker:
    """Dependency to get the broker."""
    if broker is None:
        raise HTTPException(status_code=500, detail="Broker not initialized")
    return broker


@router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(broker: Broker = Depends(get_broker)):
    """List respondent conversations."""
    records = broker.engine.list_all()
    return ConversationListResponse(
        conversations=[ConversationSummaryResponse.from_record(r) for r in records],
        total=len(records),
        by_state=dict(Counter(r.state.value for r in records))
    )


@router.get("/conversations/{identity}", response_model=ConversationSummaryResponse)
async def get_conversation(
    identity: str,
    broker: Broker = Depends(get_broker)
):
    """Get the conversation for a respondent identity."""
    record = broker.engine.get(identity)
    if not record:
        raise HTTPException(status_code=404, detail=f"Conversation not found: {identity}")
    return ConversationSummaryResponse.from_record(record)


@router.get("/groups", response_model=GroupListResponse)
async def list_groups(broker: Broker = Depends(get_broker)):
    """List groups visible to the transport account, for filling the topics file."""
    try:
        groups = await broker.transport.list_groups()
    except httpx.HTTPError as e:
        get_app_logger().error(f"Failed to list groups: {e}")
        raise HTTPException(status_code=502, detail="Messaging gateway unavailable")

    return GroupListResponse(
        groups=[GroupResponse(id=g.id, name=g.name) for g in groups],
        total=len(groups)
    )
