"""
Application configuration from environment variables.

In development the project-root .env is loaded first (python-dotenv) so the
variables below can be kept out of the shell. Validates the signing
secret at module load; a missing value raises RuntimeError.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Environment: development | production | test (affects .env loading)
ENV = os.getenv("ENV", "development").lower()

if ENV == "development":
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# --- Required (raise if missing) ---
JWT_SECRET = os.getenv("JWT_SECRET")

if not JWT_SECRET or not str(JWT_SECRET).strip():
    raise RuntimeError("Required env var JWT_SECRET is missing or empty")

JWT_ALGORITHM = "HS256"

# --- Optional with defaults ---
# Issuer / audience are only embedded and verified when configured
JWT_ISSUER = os.getenv("JWT_ISSUER") or None
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE") or None


def _int_env(key: str, default: int, minimum: int = 1) -> int:
    try:
        return max(minimum, int(os.getenv(key, str(default))))
    except ValueError:
        return default


def _bool_env(key: str, default: str = "false") -> bool:
    return os.getenv(key, default).lower() in ("1", "true", "yes")


# Token lifetime; 24 hours unless overridden
JWT_EXPIRE_MINUTES = _int_env("JWT_EXPIRE_MINUTES", 1440)

# bcrypt cost factor, fixed for the deployment
BCRYPT_ROUNDS = min(_int_env("BCRYPT_ROUNDS", 12, minimum=4), 31)

# Frontend origin allowed by CORS
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")

# Google Books catalog lookup
GOOGLE_BOOKS_API_URL = os.getenv(
    "GOOGLE_BOOKS_API_URL", "https://www.googleapis.com/books/v1/volumes"
)
GOOGLE_BOOKS_API_KEY = os.getenv("GOOGLE_BOOKS_API_KEY") or None
CATALOG_MAX_RESULTS = min(_int_env("CATALOG_MAX_RESULTS", 20), 40)

# Request timeouts (connect, read) in seconds
CATALOG_REQUEST_TIMEOUT = (
    _int_env("CATALOG_CONNECT_TIMEOUT", 5),
    _int_env("CATALOG_READ_TIMEOUT", 15),
)

# Database URL (SQLite default; use Postgres URL in production)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booktracker.db")

# Skip create_all at startup (set in production when the schema is managed elsewhere)
SKIP_DB_INIT = _bool_env("SKIP_DB_INIT")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
