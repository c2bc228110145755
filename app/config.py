import os


def normalize_database_url(raw_url: str) -> str:
    if raw_url.startswith("postgres://"):
        return raw_url.replace("postgres://", "postgresql://", 1)
    return raw_url


TRUTHY = {"1", "true", "yes", "on"}


def parse_flag(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUTHY


def env_flag(name: str, default: str = "false") -> bool:
    return parse_flag(os.getenv(name, default))


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-unsafe-key")
    SQLALCHEMY_DATABASE_URI = normalize_database_url(
        os.getenv("DATABASE_URL", "sqlite:///instance/mystic_tours.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }
    JSON_SORT_KEYS = False
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.getenv("CACHE_DEFAULT_TIMEOUT", "120"))
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "200 per day;80 per hour")
    RATELIMIT_ENABLED = True
    # Public booking forms are throttled per client address.
    BOOKING_RATELIMIT = os.getenv("BOOKING_RATELIMIT", "5 per minute;30 per hour")

    TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
    TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID")
    TELEGRAM_TIMEOUT = int(os.getenv("TELEGRAM_TIMEOUT", "8"))
    NOTIFICATIONS_ENABLED = env_flag("NOTIFICATIONS_ENABLED", "true")

    ALLOW_MANUAL_CONFIRMATION = env_flag("ALLOW_MANUAL_CONFIRMATION")
    BOOKING_MAX_DAYS_AHEAD = int(os.getenv("BOOKING_MAX_DAYS_AHEAD", "365"))
    ADMIN_BOOKING_LIST_LIMIT = int(os.getenv("ADMIN_BOOKING_LIST_LIMIT", "100"))

    SENTRY_DSN = os.getenv("SENTRY_DSN")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False
    TESTING = False


class TestingConfig(BaseConfig):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    CACHE_TYPE = "NullCache"
    RATELIMIT_ENABLED = False
    NOTIFICATIONS_ENABLED = False
    TELEGRAM_BOT_TOKEN = None
    TELEGRAM_CHAT_ID = None
    ALLOW_MANUAL_CONFIRMATION = False


config_by_env = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
