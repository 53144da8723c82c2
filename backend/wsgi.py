"""
wsgi.py — Server entry point.

    flask --app backend.wsgi run
    gunicorn backend.wsgi:app

The config is picked from FLASK_ENV (development when unset).
"""

import os

from backend.boardgroups import create_app

app = create_app(os.getenv("FLASK_ENV", "development"))
