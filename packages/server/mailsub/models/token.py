"""Verification token model."""

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import MailSegmentMixin, UUIDMixin, timestamp_field


class Token(UUIDMixin, MailSegmentMixin, SQLModel, table=True):
    __tablename__ = "tokens"
    __table_args__ = (
        sa.Index("ix_tokens_mail_segment", "mail_base64", "category", "subcategory", "sent_at"),
        sa.Index("ix_tokens_segment", "category", "subcategory"),
    )

    token: str = Field(max_length=256, nullable=False, unique=True)
    # Reset on every rotation.
    sent_at: datetime = timestamp_field()
