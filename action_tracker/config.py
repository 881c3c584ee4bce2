"""Environment-driven settings for the action tracker."""

import os

SQLITE_PATH = os.getenv("SQLITE_PATH", "data.sqlite")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ALLOWED_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

# express.json() limit of the first deployment
MAX_BODY_BYTES = 200 * 1024


def database_url(path: str = SQLITE_PATH) -> str:
    """Build a SQLAlchemy URL for a SQLite file path (or ``:memory:``)."""
    if path in ("", ":memory:"):
        return "sqlite://"
    return f"sqlite:///{path}"
