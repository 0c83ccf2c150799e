"""Suspend past-due subscriptions whose grace period has expired."""
from __future__ import annotations

import asyncio
import logging

from reservapp.db.session import get_sessionmaker
from reservapp.services.penalty_application_service import (
    suspend_expired_subscriptions,
)


async def run() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        suspended = await suspend_expired_subscriptions(session)
    print(f"Suspended {suspended} subscription(s).")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())


if __name__ == "__main__":
    main()
