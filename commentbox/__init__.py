from __future__ import annotations
import logging
from typing import Optional

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
from flask_limiter import Limiter
from flask_sqlalchemy import SQLAlchemy
from werkzeug.middleware.proxy_fix import ProxyFix

from .utils.fingerprint import UNKNOWN_ADDRESS, client_address


def _rate_limit_key() -> str:
    """Same client address the like fingerprint is built from."""
    config = current_app.config["COMMENTBOX"]
    return client_address(request, config.client_address_headers) or UNKNOWN_ADDRESS


db = SQLAlchemy()
limiter = Limiter(key_func=_rate_limit_key)


def create_app(config=None) -> Flask:
    """
    App factory. `config` is an immutable CommentboxConfig; when omitted it is
    read once from the environment.
    """
    from .config import CommentboxConfig
    from .routes import api_bp
    from .safeguards import register_api_safeguards
    from .services.likes import LikeLedger
    from .utils.db import install_sqlite_pragmas

    config = config or CommentboxConfig.from_env()

    app = Flask(__name__)
    if config.proxy_fix_x_for:
        # remote_addr taken from the hop the trusted proxies appended
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=config.proxy_fix_x_for)
    app.config.update(config.flask_settings())
    app.config["COMMENTBOX"] = config
    app.logger.setLevel(getattr(logging, config.log_level, logging.INFO))

    db.init_app(app)
    limiter.init_app(app)
    CORS(
        app,
        resources={r"/api/*": {"origins": config.cors_origin}},
        methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        supports_credentials=False,
        max_age=config.cors_max_age,
    )
    register_api_safeguards(app, config)
    _register_error_handlers(app)
    app.register_blueprint(api_bp, url_prefix="/api")

    with app.app_context():
        from . import models  # noqa: F401  (registers tables)
        install_sqlite_pragmas(db.engine)
        db.create_all()
        app.extensions["like_ledger"] = LikeLedger(db.engine)
        app.logger.info("[commentbox] ready db=%s", db.engine.dialect.name)

    return app


def _register_error_handlers(app: Flask) -> None:
    from .errors import DomainError

    def _is_api() -> bool:
        return request.path.startswith("/api/")

    @app.errorhandler(DomainError)
    def _domain_error(err: DomainError):
        return jsonify(error=err.message, reason=err.reason), err.status

    @app.errorhandler(400)
    def _json_400(err):
        if _is_api():
            return jsonify(error="Bad Request"), 400
        return "Bad Request", 400

    @app.errorhandler(404)
    def _json_404(err):
        if _is_api():
            return jsonify(error="Not Found"), 404
        return "Not Found", 404

    @app.errorhandler(405)
    def _json_405(err):
        if _is_api():
            resp = jsonify(error="Method Not Allowed")
            allow = getattr(err, "valid_methods", None)
            if allow:
                resp.headers["Allow"] = ", ".join(allow)
            return resp, 405
        return "Method Not Allowed", 405

    @app.errorhandler(429)
    def _json_429(err):
        return jsonify(error="Too Many Requests"), 429

    @app.errorhandler(500)
    def _json_500(err):
        app.logger.error("[commentbox] unhandled error on %s: %r", request.path,
                         getattr(err, "original_exception", err))
        return jsonify(error="Internal Server Error"), 500
