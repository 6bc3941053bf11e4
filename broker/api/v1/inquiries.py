"""Inquiry ledger and topic REST API routes - V1."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from ...models.api import (
    InquiryListResponse,
    InquiryResponse,
    TopicListResponse,
    TopicResponse
)
from ...models.inquiry import InquiryStatus
from ...services.broker import Broker

router = APIRouter(prefix="/api/v1", tags=["Inquiries"])

# Broker instance (set by main.py)
broker: Broker = None


def get_broker() -> Broker:
    """Dependency to get the broker."""
    if broker is None:
        raise HTTPException(status_code=500, detail="Broker not initialized")
    return broker


@router.get("/inquiries", response_model=InquiryListResponse)
async def list_inquiries(
    status: Optional[InquiryStatus] = Query(None, description="Filter by status"),
    broker: Broker = Depends(get_broker)
):
    """List inquiries, optionally filtered by status."""
    records = broker.ledger.list_all(status)
    return InquiryListResponse(
        inquiries=[InquiryResponse.from_record(r) for r in records],
        counter=broker.ledger.counter,
        total=len(records)
    )


@router.get("/inquiries/{sequence_number}", response_model=InquiryResponse)
async def get_inquiry(
    sequence_number: int,
    broker: Broker = Depends(get_broker)
):
    """Get one inquiry by number."""
    record = broker.ledger.get(sequence_number)
    if not record:
        raise HTTPException(status_code=404, detail=f"Inquiry not found: #{sequence_number}")
    return InquiryResponse.from_record(record)


@router.get("/topics", response_model=TopicListResponse)
async def list_topics(broker: Broker = Depends(get_broker)):
    """List configured topics and their destinations."""
    topics = [
        TopicResponse(keyword=keyword, destinations=destinations)
        for keyword, destinations in broker.topics.to_dict().items()
    ]
    return TopicListResponse(topics=topics, total=len(topics))
