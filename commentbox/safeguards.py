from __future__ import annotations
from flask import request, make_response


def register_api_safeguards(app, config):
    # Preflight for every /api/* path answered before routing (204, no DB)
    @app.before_request
    def _skip_options_preflight():
        if request.method == "OPTIONS" and request.path.startswith("/api/"):
            resp = make_response(("", 204))
            h = resp.headers
            h["Access-Control-Allow-Origin"] = config.cors_origin
            h["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
            h["Access-Control-Allow-Headers"] = "Content-Type"
            h["Access-Control-Max-Age"] = str(config.cors_max_age)
            return resp
        return None
