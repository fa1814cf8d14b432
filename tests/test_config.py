from commentbox.config import CommentboxConfig
from commentbox.db_config import resolve_database_uri


def test_from_env_defaults(tmp_path):
    cfg = CommentboxConfig.from_env({"COMMENTBOX_SQLITE_PATH": str(tmp_path / "c.db")})
    assert cfg.database_uri == f"sqlite:///{(tmp_path / 'c.db').as_posix()}"
    assert cfg.cors_origin == "https://worldoftech.qzz.io"
    assert cfg.client_address_headers == ("CF-Connecting-IP",)
    assert cfg.proxy_fix_x_for == 0
    assert cfg.comments_page_size == 50
    assert cfg.ratelimit_enabled is True


def test_from_env_overrides():
    cfg = CommentboxConfig.from_env({
        "DATABASE_URL": "postgres://u:p@db/comments",
        "CORS_ORIGIN": "https://example.org",
        "CLIENT_ADDRESS_HEADERS": "X-Real-IP, ",
        "COMMENTS_PAGE_SIZE": "not-a-number",
        "RATELIMIT_ENABLED": "0",
        "FP_SALT": "pepper",
        "LOG_LEVEL": "debug",
        "PROXY_FIX_X_FOR": "1",
    })
    assert cfg.database_uri == "postgresql://u:p@db/comments"
    assert cfg.cors_origin == "https://example.org"
    assert cfg.client_address_headers == ("X-Real-IP",)
    assert cfg.comments_page_size == 50
    assert cfg.ratelimit_enabled is False
    assert cfg.fp_salt == "pepper"
    assert cfg.log_level == "DEBUG"
    assert cfg.proxy_fix_x_for == 1


def test_explicit_sqlite_uri_is_kept():
    assert resolve_database_uri({"COMMENTBOX_SQLITE_PATH": "sqlite:///:memory:"}) == "sqlite:///:memory:"


def test_engine_options_follow_dialect():
    pg = CommentboxConfig(database_uri="postgresql://db/x").flask_settings()
    assert pg["SQLALCHEMY_ENGINE_OPTIONS"]["pool_size"] == 5
    lite = CommentboxConfig(database_uri="sqlite:///x.db").flask_settings()
    assert lite["SQLALCHEMY_ENGINE_OPTIONS"]["connect_args"]["timeout"] == 10.0
