from __future__ import annotations
import random
import sqlite3
import time
from typing import Any, Callable, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

_PG_UNIQUE_VIOLATION = "23505"
_PG_FOREIGN_KEY_VIOLATION = "23503"


def is_transient_db_error(exc: Exception) -> bool:
    """Classify DB errors that are safe to retry.

    Tries to match by driver-specific exception classes if available, and
    falls back to message substring checks for portability across drivers.
    """
    try:  # psycopg2 errors
        from psycopg2 import errors as pg_err  # type: ignore
        orig = getattr(exc, "orig", exc)
        if isinstance(orig, (
            pg_err.DeadlockDetected,
            pg_err.SerializationFailure,
            pg_err.LockNotAvailable,
        )):
            return True
    except ImportError:
        pass

    # SQLAlchemy wraps DBAPI exceptions; unwrap if possible
    orig = getattr(exc, "orig", exc)
    msg = (str(orig) or "").lower()
    return (
        "deadlock" in msg
        or "could not serialize" in msg
        or "serialization failure" in msg
        or "database is locked" in msg
        or "lock timeout" in msg
        or ("timeout" in msg and "statement" in msg)
    )


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", exc)
    if getattr(orig, "pgcode", None) == _PG_UNIQUE_VIOLATION:
        return True
    msg = str(orig).lower()
    return "unique constraint" in msg or "duplicate key" in msg


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = getattr(exc, "orig", exc)
    if getattr(orig, "pgcode", None) == _PG_FOREIGN_KEY_VIOLATION:
        return True
    return "foreign key constraint" in str(orig).lower()


def retry_with_backoff(func: Callable[[], Any], *, attempts: int = 5, base_delay: float = 0.05) -> Any:
    """Execute callable with exponential backoff on transient DB errors.

    - Retries up to `attempts` times
    - Backoff: base_delay * 2^(n-1) + jitter (capped at 1s)
    """
    last_exc: Optional[Exception] = None
    for i in range(1, max(1, attempts) + 1):
        try:
            return func()
        except Exception as exc:  # classified below; non-transient errors propagate
            last_exc = exc
            if not is_transient_db_error(exc) or i >= attempts:
                break
            sleep_s = min(1.0, base_delay * (2 ** (i - 1)) + random.uniform(0, base_delay))
            time.sleep(sleep_s)
    if last_exc is not None:
        raise last_exc
    return None


def install_sqlite_pragmas(engine: Engine) -> None:
    """WAL, busy timeout and enforced foreign keys on every SQLite connection.

    No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas_on_connect(dbapi_conn, _):
        if not isinstance(dbapi_conn, sqlite3.Connection):
            return
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON")
            cur.execute("PRAGMA busy_timeout=10000")
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA synchronous=NORMAL")
        finally:
            cur.close()
