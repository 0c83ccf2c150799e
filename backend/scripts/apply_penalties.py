"""Apply late-payment penalties to overdue payments.

Meant to be run daily by an external scheduler (cron, k8s CronJob).
"""
from __future__ import annotations

import asyncio
import logging

from reservapp.db.session import get_sessionmaker
from reservapp.services.penalty_application_service import apply_overdue_penalties


async def run() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        summary = await apply_overdue_penalties(session)
    print(
        f"Checked {summary.checked}, applied {summary.applied}, "
        f"skipped {summary.skipped}, failed {summary.failed}."
    )


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(run())


if __name__ == "__main__":
    main()
