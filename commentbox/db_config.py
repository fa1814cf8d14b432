from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Tuple

_FALLBACK_SQLITE = "./data/commentbox.db"


def _normalize_path(raw: str) -> Path:
    """
    Expand ~ and relative paths for SQLite files to an absolute Path.
    """
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def resolve_sqlite_target(env: Optional[Mapping[str, str]] = None) -> Tuple[str, Optional[Path]]:
    """
    Return a tuple (uri, path) based on COMMENTBOX_SQLITE_PATH.
    - If it already looks like a sqlite:// URI, it is returned as-is and
      the path component is None.
    - Otherwise, ensure the parent directory exists and return the absolute path.
    """
    env = os.environ if env is None else env
    raw = (env.get("COMMENTBOX_SQLITE_PATH") or _FALLBACK_SQLITE).strip()
    if raw.startswith("sqlite:"):
        return raw, None
    path = _normalize_path(raw)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Fallback to ./data when the configured directory is not writable
        fallback = _normalize_path(f"./data/{path.name}")
        fallback.parent.mkdir(parents=True, exist_ok=True)
        path = fallback
    return f"sqlite:///{path.as_posix()}", path


def resolve_database_uri(env: Optional[Mapping[str, str]] = None) -> str:
    """
    SQLALCHEMY_DATABASE_URI / DATABASE_URL win; otherwise a local SQLite file.
    Legacy postgres:// URLs are normalized for SQLAlchemy.
    """
    env = os.environ if env is None else env
    url = env.get("SQLALCHEMY_DATABASE_URI") or env.get("DATABASE_URL")
    if not url:
        uri, _ = resolve_sqlite_target(env)
        return uri
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url
