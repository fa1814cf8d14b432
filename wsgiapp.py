from __future__ import annotations

"""WSGI entry point.

Delegates to commentbox.create_app() so there is a single
source of truth for all API endpoints.
    gunicorn wsgiapp:app
"""

import os

from commentbox import create_app

app = create_app()

# Export for servers that look for `application`
application = app

if __name__ == "__main__":
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8000"))
    app.run(host=host, port=port)
