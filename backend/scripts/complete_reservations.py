"""Mark confirmed reservations that have ended as completed."""
from __future__ import annotations

import asyncio
import logging

from reservapp.db.session import get_sessionmaker
from reservapp.services.reservation_service import complete_finished_reservations


async def run() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        completed = await complete_finished_reservations(session)
    print(f"Completed {completed} reservation(s).")


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())


if __name__ == "__main__":
    main()
