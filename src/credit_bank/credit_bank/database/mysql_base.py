from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def is_duplicate_key(exc: Exception) -> bool:
    """True when MySQL rejected a write because of a UNIQUE/PRIMARY key."""

    return isinstance(exc, mysql.connector.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, duplicate_message: Optional[str] = None):
    """Yield a dict cursor inside one transaction.

    Commits on success and rolls back on any error. When ``duplicate_message``
    is given, a unique-key violation is re-raised as ``DuplicateError``.
    """

    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=True)
    try:
        yield cur
        conn.commit()
    except mysql.connector.Error as e:
        conn.rollback()
        if duplicate_message and is_duplicate_key(e):
            raise DuplicateError(duplicate_message) from e
        logger.warning("MySQL error (errno=%s): %s", getattr(e, "errno", None), e)
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])
