"""Apply SQL schema for local PostgreSQL setup."""

from __future__ import annotations

import logging
from pathlib import Path

from testiflow.backend.config import load_settings


SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")

logger = logging.getLogger(__name__)


def main() -> None:
    settings = load_settings()
    if not settings.database_url:
        raise RuntimeError("TESTIFLOW_DATABASE_URL is required for migration")

    import psycopg

    schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")

    with psycopg.connect(settings.database_url) as conn:
        with conn.cursor() as cur:
            cur.execute(schema_sql)
        conn.commit()
    logger.info("Applied schema %s", SCHEMA_PATH.name)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
