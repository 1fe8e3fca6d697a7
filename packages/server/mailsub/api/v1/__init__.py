"""
API v1 Router
"""

from fastapi import APIRouter
from . import subscriptions, tokens

router = APIRouter()

router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
router.include_router(tokens.router, prefix="/tokens", tags=["Tokens"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/subscriptions",
            "/subscriptions/segment",
            "/subscriptions/mails",
            "/tokens",
            "/tokens/refresh",
            "/tokens/mails",
        ],
    }
