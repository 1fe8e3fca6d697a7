# SQLModel definitions — imported here to ensure metadata is populated before create_all.
from .base import UUIDMixin, MailSegmentMixin  # noqa: F401
from .subscription import Subscription  # noqa: F401
from .token import Token  # noqa: F401
