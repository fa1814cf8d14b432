"""Insert demo comments. Reads ./comments.json when present.

    python scripts/seed_comments.py
"""
import json
import os

from commentbox import create_app
from commentbox.errors import BadInput
from commentbox.services import comments as comments_service

payload = []
if os.path.isfile("comments.json"):
    with open("comments.json", "r", encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, dict):
        payload = payload.get("comments", [])
if not payload:
    payload = [
        {"username": "demo_1", "text": "First comment, hello there"},
        {"username": "demo_2", "text": "Nice article, thanks for sharing"},
        {"username": "demo_3", "text": "Looking forward to the next post"},
    ]

app = create_app()
inserted = 0
with app.app_context():
    for item in payload:
        try:
            comments_service.create(item)
            inserted += 1
        except BadInput as exc:
            app.logger.warning("[seed] skipped %r: %s", item, exc.message)
print(f"inserted {inserted} comments")
