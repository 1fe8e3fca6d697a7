"""Subscription model: one mail subscribed to one category/subcategory."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import SQLModel

from .base import MailSegmentMixin, UUIDMixin, timestamp_field


class Subscription(UUIDMixin, MailSegmentMixin, SQLModel, table=True):
    __tablename__ = "subscriptions"
    # No unique constraint on the triple; Subscribe checks before inserting.
    __table_args__ = (
        sa.Index("ix_subscriptions_mail_segment", "mail_base64", "category", "subcategory"),
        sa.Index("ix_subscriptions_segment", "category", "subcategory"),
    )

    subscribed_at: datetime = timestamp_field()
