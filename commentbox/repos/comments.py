from commentbox import db
from commentbox.models import Comment


def create_comment(username: str, text: str) -> Comment:
    c = Comment(username=username, text=text, likes=0)
    db.session.add(c)
    db.session.commit()
    db.session.refresh(c)
    return c


def list_comments(limit: int):
    return (Comment.query
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .limit(limit)
            .all())
