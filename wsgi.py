"""
WSGI / Flask-Migrate entry point.

create_app() creates any missing tables on startup, so a fresh database
needs no migration step. Schema changes after that go through
Flask-Migrate; the repository ships no migrations directory, so the first
run initialises one:

Usage:
    gunicorn wsgi:app
    flask --app wsgi db init                      # once, creates migrations/
    flask --app wsgi db migrate -m "description"
    flask --app wsgi db upgrade
"""

from portal import create_app

app = create_app()
