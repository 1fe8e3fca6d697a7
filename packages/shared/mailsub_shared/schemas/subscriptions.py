"""Subscription schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, UUID4

from .common import MailSegmentRequest


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class SubscribeRequest(MailSegmentRequest):
    """Subscribe a mail (plain or base64) to a category/subcategory."""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class SubscriptionResponse(BaseModel):
    id: UUID4
    mail_base64: str
    category: str
    subcategory: str
    subscribed_at: datetime


class SubscriptionListResponse(BaseModel):
    data: List[SubscriptionResponse]


class SubscribedMailsResponse(BaseModel):
    """Encoded mails subscribed to one category/subcategory."""
    data: List[str]
