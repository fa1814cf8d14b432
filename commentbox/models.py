from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy import func, UniqueConstraint, CheckConstraint
from . import db


class Comment(db.Model):
    __tablename__ = "comments"
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(20), nullable=False)
    text = db.Column(db.Text, nullable=False)
    # Only the like ledger writes this column, always as likes = likes + 1
    likes = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now(), index=True)

    __table_args__ = (
        CheckConstraint("likes >= 0", name="ck_comments_likes_non_negative"),
    )

    def to_dict(self):
        created = self.created_at or datetime.now(timezone.utc)
        return {
            "id": self.id,
            "username": self.username,
            "text": self.text,
            "likes": self.likes or 0,
            "created_at": created.isoformat(),
        }


class CommentLike(db.Model):
    __tablename__ = "comment_likes"
    id = db.Column(db.Integer, primary_key=True)
    comment_id = db.Column(db.Integer, db.ForeignKey("comments.id"), nullable=False, index=True)
    user_identifier = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())

    # One like per (comment, client); the database is the arbiter
    __table_args__ = (
        UniqueConstraint("comment_id", "user_identifier", name="uq_comment_likes_comment_user"),
    )
