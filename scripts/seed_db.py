"""Load database/seed.sql (demo users, groups, attendance and a blog package).

Usage: APP_ENV=development python scripts/seed_db.py
"""
from __future__ import annotations

from dotenv import load_dotenv

from connect_hub.database.bootstrap import SQL_DIR, apply_seed_sql
from connect_hub.settings import load_settings


def main() -> None:
    load_dotenv(override=False)
    db_config = load_settings().db_config

    statements = apply_seed_sql(db_config, seed_path=SQL_DIR / "seed.sql")
    print(
        f"OK: seeded {statements} statements -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
