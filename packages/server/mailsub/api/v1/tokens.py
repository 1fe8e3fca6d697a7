"""
Verification token endpoints.

POST   /api/v1/tokens                                  — Issue a new token row
GET    /api/v1/tokens?mail=&category=&subcategory=     — Tokens for a mail and segment
POST   /api/v1/tokens/refresh                          — Reuse, rotate (stale) or create
GET    /api/v1/tokens/mails?category=&subcategory=     — Mail/token pairs for a segment
GET    /api/v1/tokens/{token}                          — Token row by value
DELETE /api/v1/tokens/{token}                          — Remove a token by value

Unlike subscriptions, empty token lists answer 404 with ``{"data": []}``.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from mailsub.core.config import Settings, get_settings
from mailsub.core.database import get_session
from mailsub.models.token import Token
from mailsub.services import tokens as token_service
from mailsub_shared.schemas.common import MailSegmentRequest, SegmentQuery
from mailsub_shared.schemas.tokens import (
    MailTokenListResponse,
    MailTokenPair,
    TokenListResponse,
    TokenRefreshResponse,
    TokenRequest,
    TokenResponse,
)

router = APIRouter()


def _to_response(row: Token) -> TokenResponse:
    return TokenResponse(
        id=row.id,
        mail_base64=row.mail_base64,
        token=row.token,
        category=row.category,
        subcategory=row.subcategory,
        sent_at=row.sent_at,
    )


def _empty_not_found() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"data": []})


@router.post(
    "",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Tokens"],
)
async def create_token(
    body: TokenRequest,
    session: AsyncSession = Depends(get_session),
):
    """Create a token row for pending mail validation (always a new row)."""
    row = await token_service.create(body.mail, body.category, body.subcategory, session)
    await session.commit()
    return _to_response(row)


@router.get(
    "",
    response_model=TokenListResponse,
    responses={404: {"description": "No tokens for this mail and segment"}},
    tags=["Tokens"],
)
async def find_tokens(
    lookup: Annotated[MailSegmentRequest, Query()],
    session: AsyncSession = Depends(get_session),
):
    """Find tokens by mail (plain or base64), category and subcategory."""
    rows = await token_service.find_by_lookup(
        lookup.mail, lookup.category, lookup.subcategory, session
    )
    if not rows:
        return _empty_not_found()
    return TokenListResponse(data=[_to_response(r) for r in rows])


@router.post(
    "/refresh",
    response_model=TokenRefreshResponse,
    responses={201: {"description": "No token existed; a new one was created"}},
    tags=["Tokens"],
)
async def refresh_or_create_token(
    body: TokenRequest,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Return the active token, rotating it when older than the refresh window.

    201 when a token was created, 200 when an existing one was rotated or reused.
    ``outcome == "unchanged"`` means the token is still valid and need not be resent.
    """
    result = await token_service.refresh_or_create(
        body.mail,
        body.category,
        body.subcategory,
        session,
        max_age=timedelta(hours=settings.token_refresh_hours),
    )
    await session.commit()
    payload = TokenRefreshResponse(
        **_to_response(result.token).model_dump(),
        outcome=result.outcome,
        created=result.created,
        refreshed=result.refreshed,
    )
    status_code = status.HTTP_201_CREATED if result.created else status.HTTP_200_OK
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


@router.get(
    "/mails",
    response_model=MailTokenListResponse,
    responses={404: {"description": "No tokens for this segment"}},
    tags=["Tokens"],
)
async def list_segment_tokens(
    segment: Annotated[SegmentQuery, Query()],
    session: AsyncSession = Depends(get_session),
):
    """Mail/token pairs for one category/subcategory."""
    rows = await token_service.list_by_category(
        segment.category, segment.subcategory, session
    )
    if not rows:
        return _empty_not_found()
    return MailTokenListResponse(
        data=[MailTokenPair(mail_base64=r.mail_base64, token=r.token) for r in rows]
    )


@router.get(
    "/{token}",
    response_model=TokenResponse,
    responses={404: {"description": "Token not found"}},
    tags=["Tokens"],
)
async def get_token(token: str, session: AsyncSession = Depends(get_session)):
    row = await token_service.find_by_token(token, session)
    if row is None:
        raise HTTPException(status_code=404, detail="Token not found")
    return _to_response(row)


@router.delete(
    "/{token}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"description": "Token not found"}},
    tags=["Tokens"],
)
async def delete_token(token: str, session: AsyncSession = Depends(get_session)):
    deleted = await token_service.delete_by_token(token, session)
    await session.commit()
    if not deleted:
        raise HTTPException(status_code=404, detail="Token not found")
