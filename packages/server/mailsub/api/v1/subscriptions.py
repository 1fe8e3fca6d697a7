"""
Subscription endpoints.

POST   /api/v1/subscriptions                                  — Subscribe (idempotent)
GET    /api/v1/subscriptions                                  — List every subscription
GET    /api/v1/subscriptions/segment?category=&subcategory=   — List a segment's rows
GET    /api/v1/subscriptions/mails?category=&subcategory=     — List a segment's mails
DELETE /api/v1/subscriptions/{subscriptionId}                 — Remove a subscription

Empty lists answer 204 with no body.
"""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mailsub.core.database import get_session
from mailsub.models.subscription import Subscription
from mailsub.services import subscriptions as subscription_service
from mailsub_shared.schemas.common import SegmentQuery
from mailsub_shared.schemas.subscriptions import (
    SubscribedMailsResponse,
    SubscribeRequest,
    SubscriptionListResponse,
    SubscriptionResponse,
)

router = APIRouter()


def _to_response(row: Subscription) -> SubscriptionResponse:
    return SubscriptionResponse(
        id=row.id,
        mail_base64=row.mail_base64,
        category=row.category,
        subcategory=row.subcategory,
        subscribed_at=row.subscribed_at,
    )


@router.post(
    "",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Subscriptions"],
)
async def subscribe(
    body: SubscribeRequest,
    session: AsyncSession = Depends(get_session),
):
    """Subscribe a mail to a category/subcategory. Repeats return the existing row."""
    row = await subscription_service.subscribe(
        body.mail, body.category, body.subcategory, session
    )
    await session.commit()
    return _to_response(row)


@router.get(
    "",
    response_model=SubscriptionListResponse,
    responses={204: {"description": "No subscriptions"}},
    tags=["Subscriptions"],
)
async def list_subscriptions(session: AsyncSession = Depends(get_session)):
    """Entire subscriptions table."""
    rows = await subscription_service.list_all(session)
    if not rows:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return SubscriptionListResponse(data=[_to_response(r) for r in rows])


@router.get(
    "/segment",
    response_model=SubscriptionListResponse,
    responses={204: {"description": "No subscriptions for this segment"}},
    tags=["Subscriptions"],
)
async def list_segment(
    segment: Annotated[SegmentQuery, Query()],
    session: AsyncSession = Depends(get_session),
):
    """Subscription rows for one category/subcategory."""
    rows = await subscription_service.list_by_category(
        segment.category, segment.subcategory, session
    )
    if not rows:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return SubscriptionListResponse(data=[_to_response(r) for r in rows])


@router.get(
    "/mails",
    response_model=SubscribedMailsResponse,
    responses={204: {"description": "No subscriptions for this segment"}},
    tags=["Subscriptions"],
)
async def list_segment_mails(
    segment: Annotated[SegmentQuery, Query()],
    session: AsyncSession = Depends(get_session),
):
    """Encoded mails subscribed to one category/subcategory."""
    rows = await subscription_service.list_by_category(
        segment.category, segment.subcategory, session
    )
    if not rows:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return SubscribedMailsResponse(data=[r.mail_base64 for r in rows])


@router.delete(
    "/{subscriptionId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Subscription not found"}},
    tags=["Subscriptions"],
)
async def delete_subscription(
    subscriptionId: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    """Delete a subscription row by id."""
    deleted = await subscription_service.delete_by_id(subscriptionId, session)
    await session.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Subscription not found")
