"""Verification token schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, UUID4

from .common import MailSegmentRequest, RefreshOutcome


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class TokenRequest(MailSegmentRequest):
    """Issue or refresh a verification token for a mail and segment."""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class TokenResponse(BaseModel):
    id: UUID4
    mail_base64: str
    token: str
    category: str
    subcategory: str
    sent_at: Optional[datetime] = None


class TokenListResponse(BaseModel):
    data: List[TokenResponse]


class TokenRefreshResponse(TokenResponse):
    """Token row plus what RefreshOrCreate did with it.

    ``created`` and ``refreshed`` are derived from ``outcome``:
    created -> (True, True), refreshed -> (False, True), unchanged -> (False, False).
    """
    outcome: RefreshOutcome
    created: bool
    refreshed: bool


class MailTokenPair(BaseModel):
    mail_base64: str
    token: str


class MailTokenListResponse(BaseModel):
    data: List[MailTokenPair]
