from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from .db_config import resolve_database_uri
from .utils.fingerprint import DEFAULT_ADDRESS_HEADERS

_TRUTHY = ("1", "true", "yes", "on")


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(env.get(name) or default)
    except ValueError:
        return default


@dataclass(frozen=True)
class CommentboxConfig:
    """Process-wide settings, built once and handed to create_app()."""

    database_uri: str
    cors_origin: str = "https://worldoftech.qzz.io"
    cors_max_age: int = 86400
    fp_salt: str = ""
    client_address_headers: Tuple[str, ...] = DEFAULT_ADDRESS_HEADERS
    # Number of trusted reverse proxies in front of the app (0 = none)
    proxy_fix_x_for: int = 0
    comments_page_size: int = 50
    like_rate_limit: str = "30 per minute"
    comment_rate_limit: str = "1 per 10 seconds"
    ratelimit_enabled: bool = True
    ratelimit_storage_uri: str = "memory://"
    log_level: str = "INFO"
    testing: bool = False
    engine_options: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "CommentboxConfig":
        env = os.environ if env is None else env
        headers = tuple(
            h.strip() for h in (env.get("CLIENT_ADDRESS_HEADERS") or "").split(",") if h.strip()
        ) or DEFAULT_ADDRESS_HEADERS
        return cls(
            database_uri=resolve_database_uri(env),
            cors_origin=env.get("CORS_ORIGIN") or cls.cors_origin,
            fp_salt=env.get("FP_SALT", ""),
            client_address_headers=headers,
            proxy_fix_x_for=max(0, _env_int(env, "PROXY_FIX_X_FOR", 0)),
            comments_page_size=max(1, min(200, _env_int(env, "COMMENTS_PAGE_SIZE", 50))),
            like_rate_limit=env.get("LIKE_RATE_LIMIT") or cls.like_rate_limit,
            comment_rate_limit=env.get("COMMENT_RATE_LIMIT") or cls.comment_rate_limit,
            ratelimit_enabled=_env_bool(env, "RATELIMIT_ENABLED", True),
            ratelimit_storage_uri=env.get("RATELIMIT_STORAGE_URI") or cls.ratelimit_storage_uri,
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

    def flask_settings(self) -> dict:
        return {
            "SQLALCHEMY_DATABASE_URI": self.database_uri,
            "SQLALCHEMY_ENGINE_OPTIONS": dict(self.engine_options) or _engine_options_for(self.database_uri),
            "RATELIMIT_ENABLED": self.ratelimit_enabled,
            "RATELIMIT_STORAGE_URI": self.ratelimit_storage_uri,
            "TESTING": self.testing,
        }


def _engine_options_for(uri: str) -> dict:
    opts: dict = {"pool_pre_ping": True}
    if uri.startswith("postgresql"):
        # Keep the pool small to avoid exhausting server connections
        opts.update({"pool_size": 5, "max_overflow": 5, "pool_recycle": 280})
    elif uri.startswith("sqlite"):
        # Writers wait on the lock instead of failing straight away
        opts.update({"connect_args": {"timeout": 10.0, "check_same_thread": False}})
    return opts
