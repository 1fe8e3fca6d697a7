"""
Script to create the tables and optionally subscribe one mail, for local setups.

    python -m mailsub.scripts.init_db
    python -m mailsub.scripts.init_db --mail alice@example.com --category news --subcategory weekly
"""

import argparse
import asyncio
import sys
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from mailsub.core.config import get_settings
from mailsub.core.database import get_session_context, init_db
from mailsub.services import subscriptions as subscription_service


async def bootstrap(
    database_url: str,
    mail: Optional[str] = None,
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
) -> Optional[bool]:
    """Create tables; subscribe ``mail`` if given.

    Returns None when nothing was subscribed, True when a new subscription row
    was written and False when the mail was already subscribed.
    """
    engine = create_async_engine(database_url)
    factory = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        await init_db(engine)
        print("Tables ready.")
        if mail is None:
            return None

        async with get_session_context(factory) as session:
            before = await subscription_service.list_by_category(category, subcategory, session)
            row = await subscription_service.subscribe(mail, category, subcategory, session)
            created = all(existing.id != row.id for existing in before)

        if created:
            print(f"Subscribed {row.mail_base64} to {category}/{subcategory} (id={row.id}).")
        else:
            print(f"{row.mail_base64} already subscribed to {category}/{subcategory} (id={row.id}).")
        return created
    finally:
        await engine.dispose()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create tables and seed a subscription.")
    parser.add_argument("--database-url", default=None, help="Overrides MAILSUB_DATABASE_URL")
    parser.add_argument("--mail", help="Plain or base64 mail to subscribe")
    parser.add_argument("--category")
    parser.add_argument("--subcategory")
    args = parser.parse_args(argv)

    if args.mail and not (args.category and args.subcategory):
        parser.error("--mail requires --category and --subcategory")

    database_url = args.database_url or get_settings().database_url
    asyncio.run(bootstrap(database_url, args.mail, args.category, args.subcategory))
    return 0


if __name__ == "__main__":
    sys.exit(main())
