import os


def _flag(name: str, default: str = "") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./church_events.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")


class Config:
    ADMIN_API_KEY = os.getenv("ADMIN_API_KEY", "dev-admin-key")
    REGISTRATION_LOCK_TIMEOUT = int(os.getenv("REGISTRATION_LOCK_TIMEOUT", "10"))
    REGISTRATION_LOCK_WAIT = int(os.getenv("REGISTRATION_LOCK_WAIT", "5"))
    PAGE_SIZE_DEFAULT = int(os.getenv("PAGE_SIZE_DEFAULT", "10"))
    PAGE_SIZE_MAX = int(os.getenv("PAGE_SIZE_MAX", "100"))
    OCCUPANCY_RECONCILE_INTERVAL = int(os.getenv("OCCUPANCY_RECONCILE_INTERVAL", "300"))
    AUTO_CREATE_TABLES = _flag("AUTO_CREATE_TABLES", "1")
    DEBUG = _flag("CHURCH_EVENTS_DEBUG")
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL
