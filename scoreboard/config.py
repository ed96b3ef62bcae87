import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw.isdigit() or int(raw) < 1:
        return default
    return int(raw)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in ("true", "1", "yes")


# Database URL - adjust for your setup
DATABASE_URL = os.getenv("DATABASE_URL") or "sqlite+aiosqlite:///./scoreboard.db"
DATABASE_ECHO = _env_flag("DATABASE_ECHO")

ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
IS_DEVELOPMENT = ENVIRONMENT == "development"

# Header set by the identity gateway in front of the API
AUTH_SUBJECT_HEADER = os.getenv("AUTH_SUBJECT_HEADER", "X-Auth-Subject")

DEFAULT_PAGE_SIZE = _env_int("DEFAULT_PAGE_SIZE", 20)
MAX_PAGE_SIZE = max(_env_int("MAX_PAGE_SIZE", 100), DEFAULT_PAGE_SIZE)

_cors_override = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

CORS_ORIGINS = _cors_override or ([
    "http://localhost:5173",
    "http://localhost:3000",
] if IS_DEVELOPMENT else [])
