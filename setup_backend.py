"""
Infrastructure Setup Script for the Catalog Backend
This script checks the store connections and creates the schema.
"""

import logging
import sys

from sqlalchemy import func, select

from catalog.db.postgres_client import db
from catalog.db.redis_client import redis_client
from catalog.models import Brand, Category, Product

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def check_connections() -> bool:
    """Check if PostgreSQL and Redis answer."""
    logger.info("Checking connections...")

    try:
        db.ping()
        logger.info("PostgreSQL connection: OK")
    except Exception as e:
        logger.error(f"PostgreSQL connection error: {e}")
        return False

    try:
        redis_client.ping()
        logger.info("Redis connection: OK")
    except Exception as e:
        # The listing cache is optional; the API runs without it
        logger.warning(f"Redis connection error: {e}")

    return True


def report_data():
    with db.session_scope("count catalog rows") as session:
        for model in (Brand, Category, Product):
            count = session.scalar(select(func.count()).select_from(model).where(model.deleted_at.is_(None)))
            logger.info(f"{model.__tablename__}: {count}")


def main() -> bool:
    logger.info("Setting up Catalog Backend...")

    if not check_connections():
        logger.error("Database connection check failed!")
        return False

    db.create_tables()
    report_data()

    logger.info("Setup complete! Ready to start the server.")
    return True


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
