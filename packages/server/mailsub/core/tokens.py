"""
Verification token values.
"""

import secrets

TOKEN_BYTES = 32


def generate_token() -> str:
    """Unguessable, URL-safe token (43 chars), usable directly as a path segment."""
    return secrets.token_urlsafe(TOKEN_BYTES)
