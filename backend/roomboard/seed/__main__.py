"""
CLI entrypoint for running the seed script.

Usage:
    python -m roomboard.seed
    python -m roomboard.seed --force
"""

import argparse
import logging
import sys

from roomboard.core.config import settings
from roomboard.core.db import SessionLocal, init_db
from roomboard.core.logging import configure_logging
from roomboard.seed.seed_data import run_seed

logger = logging.getLogger(__name__)


def main():
    """Main entrypoint for seed script."""
    parser = argparse.ArgumentParser(description="Seed Roomboard database with demo data")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Force seeding even if users already exist"
    )

    args = parser.parse_args()

    configure_logging(settings.LOG_LEVEL)
    init_db()

    # Create database session
    db = SessionLocal()

    try:
        run_seed(db, force=args.force)
    except Exception:
        logger.exception("Error during seeding")
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
