"""
Mail normalization shared by the subscription and token policies.

Mails are stored and looked up in their base64 form. Callers may send either a
plain address or a value that is already encoded; ``normalize_mail`` returns the
same key for both.
"""

from __future__ import annotations

import base64
import re
from typing import Optional

# Column width for the stored (encoded) mail.
MAIL_MAX_LENGTH = 512

ENCODED_MIN_LENGTH = 16
ENCODED_PATTERN = re.compile(r"[A-Za-z0-9+/_=\-]+")

# Control characters and the ASCII space. Unicode spaces such as U+00A0 are
# part of the mail and get encoded with it.
TRIM_CHARS = "".join(chr(c) for c in range(0x21))


def trim(value: str) -> str:
    """Strip leading and trailing characters at or below U+0020."""
    return value.strip(TRIM_CHARS)


def looks_encoded(value: str) -> bool:
    """Heuristic used to decide whether a trimmed mail is already base64."""
    if "@" in value:
        return False
    if len(value) < ENCODED_MIN_LENGTH:
        return False
    return ENCODED_PATTERN.fullmatch(value) is not None


def normalize_mail(value: Optional[str]) -> Optional[str]:
    """Return the canonical encoded form of a plain or already-encoded mail.

    ``None`` passes through. Long strings without ``@`` made only of base64 /
    urlsafe characters are treated as encoded even if they are not valid
    base64; that classification is kept stable so existing keys keep matching.
    """
    if value is None:
        return None
    trimmed = trim(value)
    if looks_encoded(trimmed):
        return trimmed
    return base64.b64encode(trimmed.encode("utf-8")).decode("ascii")
