"""
Token service: verification token issue, lookup, rotation and removal.

Lifecycle for one (mail, category, subcategory) triple:

    no token    --create / refresh_or_create-->  fresh token
    fresh token --TOKEN_REFRESH_HOURS pass-->     stale token
    stale token --refresh_or_create-->           fresh token (new value, same row id)
    any token   --delete_by_token-->             no token

Aging never deletes a row; it only makes it eligible for rotation. When several
rows exist for a triple, the most recently sent one is the active token.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from mailsub.core.observability import (
    deleted_or_not,
    found_or_not,
    observed,
    row_count,
)
from mailsub.core.tokens import generate_token
from mailsub.models.base import utcnow
from mailsub.models.token import Token
from mailsub_shared.mail import normalize_mail
from mailsub_shared.schemas.common import RefreshOutcome

TOKEN_REFRESH_HOURS = 48


@dataclass(frozen=True)
class RefreshResult:
    """The active token for a triple and what refresh_or_create did to get it."""

    token: Token
    outcome: RefreshOutcome

    @property
    def created(self) -> bool:
        return self.outcome is RefreshOutcome.CREATED

    @property
    def refreshed(self) -> bool:
        return self.outcome is not RefreshOutcome.UNCHANGED


def is_stale(sent_at: Optional[datetime], now: datetime, max_age: timedelta) -> bool:
    """A token with no send time, or sent before ``now - max_age``, must be rotated."""
    return sent_at is None or sent_at < now - max_age


async def _insert(
    mail_base64: str, category: str, subcategory: str, session: AsyncSession
) -> Token:
    row = Token(
        mail_base64=mail_base64,
        token=generate_token(),
        category=category,
        subcategory=subcategory,
        sent_at=utcnow(),
    )
    session.add(row)
    await session.flush()
    return row


async def _latest(
    mail_base64: str, category: str, subcategory: str, session: AsyncSession
) -> Optional[Token]:
    result = await session.execute(
        select(Token)
        .where(
            Token.mail_base64 == mail_base64,
            Token.category == category,
            Token.subcategory == subcategory,
        )
        .order_by(Token.sent_at.desc())
        .limit(1)
    )
    return result.scalars().first()


@observed("tokens.create")
async def create(
    mail: str, category: str, subcategory: str, session: AsyncSession
) -> Token:
    """Always insert a new token row, even if the triple already has one."""
    return await _insert(normalize_mail(mail), category, subcategory, session)


@observed("tokens.find_by_lookup", outcome=row_count)
async def find_by_lookup(
    mail: str, category: str, subcategory: str, session: AsyncSession
) -> list[Token]:
    """All token rows for a triple; ``mail`` may be plain or already encoded."""
    result = await session.execute(
        select(Token).where(
            Token.mail_base64 == normalize_mail(mail),
            Token.category == category,
            Token.subcategory == subcategory,
        )
    )
    return list(result.scalars().all())


@observed("tokens.refresh_or_create", outcome=lambda r: r.outcome.value)
async def refresh_or_create(
    mail: str,
    category: str,
    subcategory: str,
    session: AsyncSession,
    max_age: timedelta = timedelta(hours=TOKEN_REFRESH_HOURS),
) -> RefreshResult:
    """Return the active token for a triple, creating or rotating it as needed.

    - no row: insert one -> ``CREATED``
    - latest row older than ``max_age`` (or never sent): new value and
      ``sent_at``, same id -> ``REFRESHED``
    - otherwise: untouched -> ``UNCHANGED`` (the caller should not resend it)
    """
    now = utcnow()
    mail_base64 = normalize_mail(mail)

    existing = await _latest(mail_base64, category, subcategory, session)
    if existing is None:
        row = await _insert(mail_base64, category, subcategory, session)
        return RefreshResult(row, RefreshOutcome.CREATED)

    if is_stale(existing.sent_at, now, max_age):
        existing.token = generate_token()
        existing.sent_at = now
        session.add(existing)
        await session.flush()
        return RefreshResult(existing, RefreshOutcome.REFRESHED)

    return RefreshResult(existing, RefreshOutcome.UNCHANGED)


@observed("tokens.find_by_token", outcome=found_or_not)
async def find_by_token(token: str, session: AsyncSession) -> Optional[Token]:
    result = await session.execute(select(Token).where(Token.token == token))
    return result.scalar_one_or_none()


@observed("tokens.delete", outcome=deleted_or_not)
async def delete_by_token(token: str, session: AsyncSession) -> bool:
    """Delete the row holding this exact token value. True if a row was removed."""
    result = await session.execute(delete(Token).where(Token.token == token))
    return result.rowcount > 0


@observed("tokens.list_by_category", outcome=row_count)
async def list_by_category(
    category: str, subcategory: str, session: AsyncSession
) -> list[Token]:
    result = await session.execute(
        select(Token).where(
            Token.category == category,
            Token.subcategory == subcategory,
        )
    )
    return list(result.scalars().all())
