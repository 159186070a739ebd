"""Seed the permission catalog and the bootstrap admin: ``python -m stockpos.seed``."""

import asyncio
import sys

from stockpos.config import db_manager, settings
from stockpos.rbac.permissions import Permissions
from stockpos.utils.logger import Logger, configure_logging
from .seeder import run_seeders

logger = Logger("seed")


async def main() -> None:
    configure_logging(settings.log_level)
    await db_manager.connect()
    try:
        await db_manager.ensure_indexes()
        report = await run_seeders(
            db_manager.database,
            catalog=Permissions,
            admin_name=settings.admin_name,
            admin_email=settings.admin_email,
            admin_password=settings.admin_password,
        )
        logger.info(f"Seeding completed: {report}")
    finally:
        db_manager.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)
