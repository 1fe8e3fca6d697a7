"""Base mixins for SQLModel tables."""

from datetime import datetime, timezone
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Naive UTC now; timestamps are stored without a zone and read back as UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UUIDMixin(SQLModel):
    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
        nullable=False,
    )


class MailSegmentMixin(SQLModel):
    """Natural key shared by subscriptions and tokens: (mail, category, subcategory)."""

    mail_base64: str = Field(max_length=512, nullable=False)
    category: str = Field(max_length=100, nullable=False)
    subcategory: str = Field(max_length=100, nullable=False)


def timestamp_field():
    return Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(),
    )
