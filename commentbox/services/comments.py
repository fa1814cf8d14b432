import logging

from sqlalchemy.exc import SQLAlchemyError

from commentbox import db
from commentbox.errors import StorageFailure
from commentbox.repos.comments import create_comment as repo_create, list_comments as repo_list
from commentbox.schemas.comments import validate_create_comment
from commentbox.utils.db import retry_with_backoff

log = logging.getLogger(__name__)


def create(data):
    """Validate, sanitize and store a new comment. Raises BadInput or StorageFailure."""
    new = validate_create_comment(data)
    try:
        return repo_create(new.username, new.text)
    except SQLAlchemyError as exc:
        db.session.rollback()
        log.warning("[comments] insert failed: %r", exc)
        raise StorageFailure("Failed to save comment") from exc


def list_(limit: int):
    def _read():
        try:
            return repo_list(limit)
        except SQLAlchemyError:
            db.session.rollback()
            raise

    try:
        return retry_with_backoff(_read, attempts=3, base_delay=0.02)
    except SQLAlchemyError as exc:
        raise StorageFailure("Failed to load comments") from exc
