"""Apply database/schema.sql to the configured database.

Usage: APP_ENV=development python scripts/init_db.py
"""
from __future__ import annotations

from dotenv import load_dotenv

from connect_hub.database.bootstrap import SQL_DIR, apply_schema, list_tables
from connect_hub.settings import load_settings


def main() -> None:
    load_dotenv(override=False)
    db_config = load_settings().db_config

    statements = apply_schema(db_config, schema_path=SQL_DIR / "schema.sql")
    tables = list_tables(db_config)
    print(
        f"OK: applied schema.sql ({statements} statements) -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"tables={', '.join(sorted(tables))}"
    )


if __name__ == "__main__":
    main()
