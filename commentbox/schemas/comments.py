from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any

from ..errors import BadInput, InvalidCommentId

USERNAME_MIN, USERNAME_MAX = 2, 20
TEXT_MIN, TEXT_MAX = 5, 500
# Largest value a 32-bit INTEGER primary key column can hold
COMMENT_ID_MAX = 2**31 - 1

_USERNAME_STRIP = re.compile(r"[^a-zA-Z0-9_\- ]")


@dataclass(frozen=True)
class NewComment:
    username: str
    text: str


@dataclass(frozen=True)
class LikeRequest:
    comment_id: int


def validate_comment_id(value: Any) -> int:
    # bool is an int subclass; floats (even 3.0) and numeric strings are rejected
    if isinstance(value, bool) or not isinstance(value, int) or not 0 < value <= COMMENT_ID_MAX:
        raise InvalidCommentId("Invalid comment ID")
    return value


def parse_like_request(data: Any) -> LikeRequest:
    if not isinstance(data, dict):
        raise InvalidCommentId("Invalid comment ID")
    return LikeRequest(comment_id=validate_comment_id(data.get("commentId")))


def validate_create_comment(data: Any) -> NewComment:
    if not isinstance(data, dict):
        raise BadInput("Invalid request body")
    username = data.get("username")
    text = data.get("text")
    if not isinstance(username, str) or not USERNAME_MIN <= len(username) <= USERNAME_MAX:
        raise BadInput(f"Invalid username ({USERNAME_MIN}-{USERNAME_MAX} chars)")
    if not isinstance(text, str) or not TEXT_MIN <= len(text) <= TEXT_MAX:
        raise BadInput(f"Invalid comment ({TEXT_MIN}-{TEXT_MAX} chars)")

    clean_username = _USERNAME_STRIP.sub("", username).strip()
    clean_text = text.replace("<", "&lt;").replace(">", "&gt;").strip()
    if len(clean_username) < USERNAME_MIN:
        raise BadInput("Username contains invalid characters")
    if not clean_text:
        raise BadInput(f"Invalid comment ({TEXT_MIN}-{TEXT_MAX} chars)")
    return NewComment(username=clean_username, text=clean_text)
