import os
from datetime import timedelta


def _int_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Config:
    raw_db_url = os.getenv("DATABASE_URL")

    if raw_db_url:
        if raw_db_url.startswith("postgres://"):
            raw_db_url = raw_db_url.replace("postgres://", "postgresql://", 1)
        SQLALCHEMY_DATABASE_URI = raw_db_url
    else:
        SQLALCHEMY_DATABASE_URI = "sqlite:///swimtrack.db"

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bounded pool + per-statement timeout; SQLite keeps driver defaults
    DB_POOL_SIZE = _int_env("DB_POOL_SIZE", 10)
    DB_MAX_OVERFLOW = _int_env("DB_MAX_OVERFLOW", 20)
    DB_POOL_TIMEOUT = _int_env("DB_POOL_TIMEOUT", 5)
    DB_STATEMENT_TIMEOUT_MS = _int_env("DB_STATEMENT_TIMEOUT_MS", 20000)

    if SQLALCHEMY_DATABASE_URI.startswith("postgresql"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_size": DB_POOL_SIZE,
            "max_overflow": DB_MAX_OVERFLOW,
            "pool_timeout": DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
            "pool_recycle": 600,
            "connect_args": {
                "options": f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}",
                "application_name": "swimtrack",
            },
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}

    DB_RETRIES = _int_env("DB_RETRIES", 3)
    DB_RETRY_BASE_DELAY = _float_env("DB_RETRY_BASE_DELAY", 1.0)

    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-dev-secret")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "").lower() in ("1", "true", "yes")
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    UPLOAD_DIR = os.getenv(
        "UPLOAD_DIR",
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "storage", "uploads"),
    )
    MAX_CONTENT_LENGTH = _int_env("MAX_UPLOAD_BYTES", 20 * 1024 * 1024)

    QUERY_CACHE_TTL = _float_env("QUERY_CACHE_TTL", 300.0)

    # Empty / unset means "return the full growth ranking"
    GROWTH_RANKING_LIMIT = _int_env("GROWTH_RANKING_LIMIT", None)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "letmein123")
