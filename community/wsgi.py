"""WSGI entry point: ``gunicorn -c deploy/gunicorn.conf.py community.wsgi:app``."""

from __future__ import annotations

import os

from community import create_app

app = create_app()

if __name__ == "__main__":
    app.run(
        host=os.environ.get("FLASK_RUN_HOST", "127.0.0.1"),
        port=int(os.environ.get("FLASK_RUN_PORT", "5000")),
    )  # nosec B104
