"""Seed admin workload and expertise records from a roster CSV.

Usage:
    python -m appeal_engine.tools.seed_admins
    python -m appeal_engine.tools.seed_admins --csv data/admins.csv
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from appeal_engine.adapters.csv_loader.loader import load_admin_roster
from appeal_engine.adapters.persistence.database import async_session_factory
from appeal_engine.adapters.persistence.repositories import (
    SqlExpertiseRepository,
    SqlWorkloadRepository,
)
from appeal_engine.application.use_cases.admin_directory import AdminDirectoryService
from appeal_engine.config import settings
from appeal_engine.domain.errors import InvalidCategoryError

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def apply_roster(directory: AdminDirectoryService, roster: list[dict]) -> dict[str, int]:
    """Register every roster admin and apply availability + expertise levels."""
    counts = {"admins": 0, "unavailable": 0, "expertise": 0, "skipped_expertise": 0}
    for entry in roster:
        admin_id = entry["admin_id"]
        await directory.on_admin_promoted(admin_id)
        counts["admins"] += 1

        if not entry["is_available"]:
            await directory.set_availability(admin_id, False)
            counts["unavailable"] += 1

        for category, level in entry["expertise"].items():
            try:
                await directory.set_experience_level(admin_id, category, level)
            except InvalidCategoryError:
                logger.warning("Admin %s: unknown category %r, skipping", admin_id, category)
                counts["skipped_expertise"] += 1
                continue
            except ValueError as e:
                logger.warning("Admin %s: %s, skipping", admin_id, e)
                counts["skipped_expertise"] += 1
                continue
            counts["expertise"] += 1
    return counts


async def seed(csv_path: Path) -> dict[str, int]:
    """Main seed function. Returns counts of applied records."""
    roster = load_admin_roster(csv_path)
    async with async_session_factory() as session:
        directory = AdminDirectoryService(
            SqlWorkloadRepository(session),
            SqlExpertiseRepository(session),
        )
        counts = await apply_roster(directory, roster)
        await session.commit()
    logger.info("Seed complete: %s", counts)
    return counts


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed admin roster into the workload store")
    parser.add_argument("--csv", default=settings.roster_csv_path, help="roster CSV path")
    args = parser.parse_args()

    csv_path = Path(args.csv)
    if not csv_path.exists():
        logger.error("Roster file not found: %s", csv_path)
        sys.exit(1)

    asyncio.run(seed(csv_path))


if __name__ == "__main__":
    main()
