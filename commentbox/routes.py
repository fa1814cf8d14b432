from __future__ import annotations
from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import text as _text
from sqlalchemy.exc import SQLAlchemyError

from . import db, limiter
from .errors import InvalidCommentId, MissingClientId
from .schemas.comments import parse_like_request
from .services import comments as comments_service
from .services.likes import LikeOutcome, submit_like
from .utils.fingerprint import client_id_from_request

# Registered with url_prefix="/api" in create_app()
api_bp = Blueprint("api", __name__)


def _config():
    return current_app.config["COMMENTBOX"]


def _ledger():
    return current_app.extensions["like_ledger"]


def _like_limit() -> str:
    return _config().like_rate_limit


def _comment_limit() -> str:
    return _config().comment_rate_limit


def _read_json():
    """Request body as parsed JSON; {} when empty, None when malformed."""
    if not request.get_data(cache=True):
        return {}
    return request.get_json(force=True, silent=True)


@api_bp.get("/comments")
def list_comments():
    rows = comments_service.list_(_config().comments_page_size)
    return jsonify(comments=[c.to_dict() for c in rows]), 200


@api_bp.post("/comments")
@limiter.limit(_comment_limit)
def create_comment():
    data = _read_json()
    if data is None:
        return jsonify(error="Invalid JSON"), 400
    comment = comments_service.create(data)
    current_app.logger.info("[comments] created id=%s", comment.id)
    return jsonify(success=True, comment=comment.to_dict()), 200


@api_bp.post("/comments/like")
@limiter.limit(_like_limit)
def like_comment():
    data = _read_json()
    try:
        like = parse_like_request(data)
    except InvalidCommentId as exc:
        outcome = LikeOutcome(False, reason=exc.reason, message=exc.message, status=exc.status)
        return jsonify(outcome.to_dict()), outcome.status

    cfg = _config()
    client_id = client_id_from_request(request, cfg.client_address_headers, cfg.fp_salt)
    if not client_id:
        exc = MissingClientId("Client ID unavailable")
        outcome = LikeOutcome(False, reason=exc.reason, message=exc.message, status=exc.status)
    else:
        outcome = submit_like(_ledger(), like.comment_id, client_id)
    return jsonify(outcome.to_dict()), outcome.status


@api_bp.get("/comments/<int:comment_id>/likes")
def like_count(comment_id: int):
    likes = _ledger().get_count(comment_id)
    return jsonify(id=comment_id, likes=likes), 200


@api_bp.get("/health")
def health():
    try:
        db.session.execute(_text("SELECT 1"))
        ok_db = True
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.warning("[health] db check failed: %r", exc)
        ok_db = False
    return jsonify(ok=True, db=ok_db), 200
