"""Simple database connectivity check."""
from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import func, inspect, select, text

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kinfolk.core.config import get_settings  # noqa: E402  (import after sys.path manipulation)
from kinfolk.db.engine import create_sync_engine  # noqa: E402
from kinfolk.models import Base  # noqa: E402

settings = get_settings()
engine = create_sync_engine()


def main() -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
        print(f"✅ Connected via {engine.dialect.name}")
        masked_password = "***" if settings.database.password else ""
        print(
            "Connection details: {user}:{pwd}@{host}:{port}/{name}".format(
                user=settings.database.user,
                pwd=masked_password,
                host=settings.database.host,
                port=settings.database.port,
                name=settings.database.name,
            )
        )

        existing = set(inspect(conn).get_table_names())
        for table in Base.metadata.sorted_tables:
            if table.name not in existing:
                print(f"  {table.name}: missing (run scripts/init_database.py create)")
                continue
            count = conn.execute(select(func.count()).select_from(table)).scalar()
            print(f"  {table.name}: {count} rows")


if __name__ == "__main__":
    main()
