"""Like ledger: at most one like per (comment, client) and a consistent count.

The UNIQUE (comment_id, user_identifier) constraint is what guarantees
at-most-once; the SELECT before the INSERT only saves a doomed write.
Insert and increment share one transaction, so a failure never leaves a
recorded like without its count.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import (
    AlreadyLiked,
    CommentNotFound,
    DomainError,
    MissingClientId,
    StorageFailure,
)
from ..schemas.comments import validate_comment_id
from ..utils.db import is_foreign_key_violation, is_unique_violation, retry_with_backoff

log = logging.getLogger(__name__)

_COMMENT_EXISTS = sa.text("SELECT 1 FROM comments WHERE id = :id")
_SELECT_COMMENT = sa.text("SELECT likes FROM comments WHERE id = :id")
_SELECT_LIKE = sa.text(
    "SELECT 1 FROM comment_likes WHERE comment_id = :cid AND user_identifier = :uid"
)
_INSERT_LIKE = sa.text(
    "INSERT INTO comment_likes (comment_id, user_identifier, created_at) "
    "VALUES (:cid, :uid, CURRENT_TIMESTAMP)"
)
_INCREMENT = sa.text("UPDATE comments SET likes = likes + 1 WHERE id = :id")


@dataclass(frozen=True)
class LikeOutcome:
    success: bool
    likes: Optional[int] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    status: int = 200
    recorded: bool = False

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "likes": self.likes}
        body: dict[str, Any] = {"success": False, "reason": self.reason, "error": self.message}
        if self.reason == StorageFailure.reason:
            body["recorded"] = self.recorded
        return body


class LikeLedger:
    def __init__(self, engine: Engine):
        self._engine = engine

    def like(self, comment_id: Any, client_id: Optional[str]) -> int:
        """Record one like for (comment_id, client_id) and return the new count.

        Raises InvalidCommentId / MissingClientId before any storage access,
        CommentNotFound, AlreadyLiked or StorageFailure otherwise.
        """
        comment_id = validate_comment_id(comment_id)
        if not client_id:
            raise MissingClientId("Client ID unavailable")
        row_params = {"id": comment_id}
        pair_params = {"cid": comment_id, "uid": client_id}
        try:
            with self._engine.begin() as cx:
                if cx.execute(_COMMENT_EXISTS, row_params).first() is None:
                    raise CommentNotFound("Comment not found")
                if cx.execute(_SELECT_LIKE, pair_params).first() is not None:
                    raise AlreadyLiked("Already liked")
                cx.execute(_INSERT_LIKE, pair_params)
                cx.execute(_INCREMENT, row_params)
                likes = cx.execute(_SELECT_COMMENT, row_params).scalar_one()
        except DomainError:
            raise
        except IntegrityError as exc:
            # A concurrent request for the same pair won the insert
            if is_unique_violation(exc):
                log.debug("[likes] unique constraint rejected comment=%s", comment_id)
                raise AlreadyLiked("Already liked") from exc
            if is_foreign_key_violation(exc):
                raise CommentNotFound("Comment not found") from exc
            log.warning("[likes] integrity error comment=%s: %r", comment_id, exc)
            raise StorageFailure("Failed to record like") from exc
        except SQLAlchemyError as exc:
            log.warning("[likes] storage failure comment=%s: %r", comment_id, exc)
            raise StorageFailure("Failed to record like") from exc
        log.info("[likes] comment=%s likes=%s", comment_id, likes)
        return int(likes)

    def get_count(self, comment_id: Any) -> int:
        comment_id = validate_comment_id(comment_id)

        def _read():
            with self._engine.connect() as cx:
                return cx.execute(_SELECT_COMMENT, {"id": comment_id}).first()

        try:
            row = retry_with_backoff(_read, attempts=3, base_delay=0.02)
        except SQLAlchemyError as exc:
            raise StorageFailure("Failed to read like count") from exc
        if row is None:
            raise CommentNotFound("Comment not found")
        return int(row.likes or 0)


def submit_like(ledger: LikeLedger, comment_id: Any, client_id: Optional[str]) -> LikeOutcome:
    """Typed-result form of LikeLedger.like() for the HTTP layer."""
    try:
        likes = ledger.like(comment_id, client_id)
    except StorageFailure as exc:
        return LikeOutcome(False, reason=exc.reason, message=exc.message,
                           status=exc.status, recorded=exc.recorded)
    except DomainError as exc:
        return LikeOutcome(False, reason=exc.reason, message=exc.message, status=exc.status)
    return LikeOutcome(True, likes=likes)
