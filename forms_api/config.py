# forms_api/config.py
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load the .env from the project root so the settings are also available
# when this module is imported indirectly (alembic, tests).
PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
dotenv_path = os.path.join(PACKAGE_DIR, "..", ".env")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL")
if DATABASE_URL is None:
    sqlite_db_path = os.path.join(PACKAGE_DIR, "forms_app.db")
    DATABASE_URL = f"sqlite+aiosqlite:///{sqlite_db_path}"
    logger.warning(
        "DATABASE_URL not set, falling back to local SQLite database %s",
        sqlite_db_path,
    )

# SQL statement echo, useful while debugging. Keep off in production.
SQL_ECHO = _env_bool("SQL_ECHO", False)

# --- Token settings ---
# Example .env:
# JWT_SECRET="change-me-to-a-long-random-string"
JWT_SECRET = os.getenv(
    "JWT_SECRET", "dev-only-secret-key-change-me-0123456789abcdef"
)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")
