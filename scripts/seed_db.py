"""Create or reset the demo admin, faculty and student accounts."""

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

from src.credit_bank.credit_bank.database.bootstrap import DEMO_USERS, ensure_demo_users
from src.credit_bank.credit_bank.database.connection import DBConfig


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_demo_users(db_config)

    print(f"OK: demo accounts in {DBConfig.from_mapping(db_config).describe()}")
    for email, _, password, role in DEMO_USERS:
        print(f"  {role.value:<8} {email} / {password}")


if __name__ == "__main__":
    main()
