#!/usr/bin/env python3
"""
Initialize the menu allocation database
Creates tables (with retries) and optionally seeds reference data:
schools of every category, a couple of recipes, and a draft menu plan.
"""

import sys
import time
import logging
import argparse
from datetime import date, timedelta
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings

logging.basicConfig(level=logging.INFO, format=settings.log_format)
logger = logging.getLogger("menualloc.init_db")


SEED_SCHOOLS = [
    ("SD Negeri 1 Harapan", "SD", 320),
    ("SD Negeri 4 Melati", "SD", 280),
    ("SMP Negeri 2 Cendana", "SMP", 410),
    ("SMA Negeri 1 Nusantara", "SMA", 530),
]

SEED_RECIPES = [
    ("Nasi Ayam Sayur", "main"),
    ("Nasi Ikan Tempe", "main"),
]


def init_schema() -> bool:
    """Create tables, retrying while the database comes up"""
    from domain.models.database import init_database, engine
    from sqlalchemy import inspect

    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            init_database()
            tables = inspect(engine).get_table_names()
            logger.info(f"Created {len(tables)} tables: {', '.join(sorted(tables))}")
            return True
        except Exception as e:
            logger.warning(
                "Schema init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                e,
            )
            if attempt < settings.db_init_attempts:
                time.sleep(settings.db_init_delay_sec)
    logger.error("Schema initialization failed")
    return False


def seed_reference_data() -> bool:
    """Insert seed schools, recipes and a draft plan for the current week"""
    from domain.models import SessionLocal, School, Recipe, MenuPlan

    db = SessionLocal()
    try:
        if db.query(School).count():
            logger.info("Schools already present; skipping seed")
            return True

        for name, category, students in SEED_SCHOOLS:
            db.add(School(name=name, category=category, student_count=students))
        for name, category in SEED_RECIPES:
            db.add(Recipe(name=name, category=category))

        monday = date.today() - timedelta(days=date.today().weekday())
        db.add(MenuPlan(week_start=monday, week_end=monday + timedelta(days=6), status="draft"))

        db.commit()
        logger.info(
            "Seeded %d schools, %d recipes and 1 menu plan",
            len(SEED_SCHOOLS),
            len(SEED_RECIPES),
        )
        return True
    except Exception:
        db.rollback()
        logger.exception("Seeding failed")
        return False
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the menu allocation database")
    parser.add_argument("--seed", action="store_true", help="Insert sample reference data")
    args = parser.parse_args(argv)

    if not init_schema():
        return 1
    if args.seed and not seed_reference_data():
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
