from enum import Enum

from pydantic import BaseModel, Field, field_validator

from mailsub_shared.mail import MAIL_MAX_LENGTH, normalize_mail, trim

CATEGORY_MAX_LENGTH = 100


class RefreshOutcome(str, Enum):
    CREATED = "created"
    REFRESHED = "refreshed"
    UNCHANGED = "unchanged"


def _not_blank(v: str) -> str:
    if not trim(v):
        raise ValueError("must not be blank")
    return v


class SegmentQuery(BaseModel):
    """A category/subcategory pair, used as query parameters for segment listings."""
    category: str = Field(min_length=1, max_length=CATEGORY_MAX_LENGTH)
    subcategory: str = Field(min_length=1, max_length=CATEGORY_MAX_LENGTH)

    @field_validator("category", "subcategory")
    @classmethod
    def segment_not_blank(cls, v: str) -> str:
        return _not_blank(v)


class MailSegmentRequest(SegmentQuery):
    """Body shared by subscribe and token requests: a mail plus its segment."""
    mail: str = Field(min_length=1)

    @field_validator("mail")
    @classmethod
    def mail_not_blank(cls, v: str) -> str:
        return _not_blank(v)

    @field_validator("mail")
    @classmethod
    def mail_fits_column(cls, v: str) -> str:
        if len(normalize_mail(v)) > MAIL_MAX_LENGTH:
            raise ValueError(f"encoded mail exceeds {MAIL_MAX_LENGTH} characters")
        return v


class ErrorBody(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorBody
