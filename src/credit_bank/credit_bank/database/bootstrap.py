"""Schema and demo-account setup used by ``create_app`` and ``scripts/``."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, Mapping

import mysql.connector
from werkzeug.security import generate_password_hash

from ..core.enums import Role
from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    ("admin@university.edu", "Portal Admin", "admin123", Role.ADMIN),
    ("faculty@university.edu", "Demo Faculty", "faculty123", Role.FACULTY),
    ("student@university.edu", "Demo Student", "student123", Role.STUDENT),
)

# schema.sql names its own database; the configured one wins
_DB_DIRECTIVE = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$", re.IGNORECASE | re.MULTILINE)
_STATEMENT_END = re.compile(r";\s*$", re.MULTILINE)


def split_schema(sql: str) -> Iterator[str]:
    """Yield the statements of a schema file.

    Statements must end with ``;`` at the end of a line; ``--`` comment lines
    are dropped.
    """

    sql = _DB_DIRECTIVE.sub("", sql)
    body = "\n".join(ln for ln in sql.splitlines() if not ln.lstrip().startswith("--"))
    for chunk in _STATEMENT_END.split(body):
        stmt = chunk.strip()
        if stmt:
            yield stmt


def _open(config: DBConfig, *, with_database: bool = True):
    return mysql.connector.connect(**config.connect_kwargs(with_database=with_database))


def ensure_database_exists(db_config: Mapping) -> None:
    config = DBConfig.from_mapping(db_config)
    conn = _open(config, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path) -> None:
    config = DBConfig.from_mapping(db_config)
    ensure_database_exists(db_config)

    schema_path = Path(schema_path)
    statements = list(split_schema(schema_path.read_text(encoding="utf-8")))

    conn = _open(config)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %s (%d statements) to %s", schema_path.name, len(statements), config.describe())


def ensure_demo_users(db_config: Mapping) -> None:
    """Create (or reset) one demo account per role."""

    config = DBConfig.from_mapping(db_config)
    conn = _open(config)
    try:
        cur = conn.cursor()
        for email, display_name, password, role in DEMO_USERS:
            cur.execute(
                """
                INSERT INTO users (email, display_name, password_hash, role, is_active)
                VALUES (%s, %s, %s, %s, 1)
                ON DUPLICATE KEY UPDATE
                    display_name=VALUES(display_name),
                    password_hash=VALUES(password_hash),
                    role=VALUES(role),
                    is_active=1
                """,
                (email, display_name, generate_password_hash(password), role.value),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready (%d accounts)", len(DEMO_USERS))


def list_tables(db_config: Mapping) -> list[str]:
    conn = _open(DBConfig.from_mapping(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
