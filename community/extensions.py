"""Flask extension singletons shared across Community modules."""

from pathlib import Path

from flask import Flask
from flask_bcrypt import Bcrypt
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# Snapshots are read back right after commits; keep loaded rows usable.
db = SQLAlchemy(session_options={"expire_on_commit": False})
migrate = Migrate(directory=str(MIGRATIONS_DIR))
bcrypt = Bcrypt()
limiter = Limiter(key_func=get_remote_address)


def init_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    # RATELIMIT_ENABLED, RATELIMIT_DEFAULT and RATELIMIT_STORAGE_URI come from app.config.
    limiter.init_app(app)
