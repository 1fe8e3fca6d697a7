"""
Subscription service: idempotent subscribe, listing and removal.

At most one row exists per (mail, category, subcategory). This is enforced
here by checking before inserting, not by a database constraint, so two
concurrent first-time subscribes for the same triple can both insert.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from mailsub.core.observability import deleted_or_not, observed, row_count
from mailsub.models.base import utcnow
from mailsub.models.subscription import Subscription
from mailsub_shared.mail import normalize_mail


async def _find_existing(
    mail_base64: str, category: str, subcategory: str, session: AsyncSession
) -> Optional[Subscription]:
    result = await session.execute(
        select(Subscription)
        .where(
            Subscription.mail_base64 == mail_base64,
            Subscription.category == category,
            Subscription.subcategory == subcategory,
        )
        .limit(1)
    )
    return result.scalars().first()


@observed("subscriptions.subscribe")
async def subscribe(
    mail: str, category: str, subcategory: str, session: AsyncSession
) -> Subscription:
    """Subscribe a mail to a segment. Returns the existing row when already subscribed."""
    mail_base64 = normalize_mail(mail)

    existing = await _find_existing(mail_base64, category, subcategory, session)
    if existing is not None:
        return existing

    subscription = Subscription(
        mail_base64=mail_base64,
        category=category,
        subcategory=subcategory,
        subscribed_at=utcnow(),
    )
    session.add(subscription)
    await session.flush()
    return subscription


@observed("subscriptions.list_all", outcome=row_count)
async def list_all(session: AsyncSession) -> list[Subscription]:
    result = await session.execute(select(Subscription))
    return list(result.scalars().all())


@observed("subscriptions.list_by_category", outcome=row_count)
async def list_by_category(
    category: str, subcategory: str, session: AsyncSession
) -> list[Subscription]:
    result = await session.execute(
        select(Subscription).where(
            Subscription.category == category,
            Subscription.subcategory == subcategory,
        )
    )
    return list(result.scalars().all())


@observed("subscriptions.delete", outcome=deleted_or_not)
async def delete_by_id(subscription_id: uuid.UUID, session: AsyncSession) -> bool:
    """Delete a subscription row. Returns False when no row has that id."""
    subscription = await session.get(Subscription, subscription_id)
    if subscription is None:
        return False
    await session.delete(subscription)
    await session.flush()
    return True
