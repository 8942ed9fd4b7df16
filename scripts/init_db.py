"""Create the database (if missing) and apply database/schema.sql.

Usage: APP_ENV=production python scripts/init_db.py
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.credit_bank.credit_bank.database.bootstrap import apply_schema, list_tables
from src.credit_bank.credit_bank.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(db_config)
    print(f"OK: {DBConfig.from_mapping(db_config).describe()} has tables: {', '.join(sorted(tables))}")


if __name__ == "__main__":
    main()
