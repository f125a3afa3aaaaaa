#!/usr/bin/env python3
"""Create, clear or drop the kinfolk tables."""
import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import func, select

from kinfolk.core.log import get_logger, init_logging
from kinfolk.db import create_sync_engine
from kinfolk.models import Base

logger = get_logger(__name__)


def is_database_empty(engine):
    """Check whether any kinfolk table holds rows."""
    with engine.connect() as connection:
        for table in Base.metadata.sorted_tables:
            if not engine.dialect.has_table(connection, table.name):
                logger.debug(f"Table {table.name} does not exist yet")
                continue
            count = connection.execute(select(func.count()).select_from(table)).scalar()
            if count:
                logger.info(f"Found {count} rows in {table.name}, database is not empty")
                return False
    logger.info("Database appears to be empty")
    return True


def create_schema(engine):
    Base.metadata.create_all(engine)
    logger.info(f"Ensured {len(Base.metadata.tables)} tables exist")


def clear_database(engine):
    """Delete all rows, child tables first."""
    if is_database_empty(engine):
        logger.info("Database is empty, skipping clear operation")
        return
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            result = connection.execute(table.delete())
            logger.info(f"Cleared {result.rowcount} rows from {table.name}")
    logger.info("Database clearing complete")


def drop_schema(engine):
    Base.metadata.drop_all(engine)
    logger.info("Dropped all kinfolk tables")


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("action", choices=("create", "clear", "drop"))
    parser.add_argument("--url", help="SQLAlchemy URL overriding the configured database")
    args = parser.parse_args(argv)

    engine = create_sync_engine(args.url)
    {"create": create_schema, "clear": clear_database, "drop": drop_schema}[args.action](engine)


if __name__ == "__main__":
    init_logging(app_name="init-database")
    main()
