import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from commentbox import create_app, db
from commentbox.config import CommentboxConfig
from commentbox.models import Comment


def make_config(tmp_path, **overrides):
    opts = {
        # File-based SQLite so concurrent writers really contend for the lock
        "database_uri": f"sqlite:///{tmp_path / 'commentbox_test.db'}",
        "ratelimit_enabled": False,
        "testing": True,
        "log_level": "DEBUG",
    }
    opts.update(overrides)
    return CommentboxConfig(**opts)


@pytest.fixture
def app(tmp_path):
    app = create_app(make_config(tmp_path))
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def ledger(app):
    return app.extensions["like_ledger"]


@pytest.fixture
def make_comment(app):
    def _make(username="alice", text="hello world", likes=0):
        with app.app_context():
            c = Comment(username=username, text=text, likes=likes)
            db.session.add(c)
            db.session.commit()
            return c.id
    return _make
