"""
Configuration module for Pastebin.
Loads environment variables and provides config objects.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    DEBUG: bool = _env_bool("DEBUG", "True")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    APP_DOMAIN: str = os.getenv("APP_DOMAIN", "http://localhost:8000")
    TEST_MODE: bool = _env_bool("TEST_MODE", "0")

    # Paste IDs (0, O, l and 1 are left out of the alphabet)
    PASTE_ID_LENGTH: int = int(os.getenv("PASTE_ID_LENGTH", "8"))
    PASTE_ID_ALPHABET: str = os.getenv(
        "PASTE_ID_ALPHABET",
        "abcdefghijkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789",
    )
    PASTE_ID_MAX_RETRIES: int = int(os.getenv("PASTE_ID_MAX_RETRIES", "5"))

    # Content limits
    MAX_CONTENT_LENGTH: int = int(os.getenv("MAX_CONTENT_LENGTH", "512000"))
    MAX_TITLE_LENGTH: int = int(os.getenv("MAX_TITLE_LENGTH", "255"))
    MAX_SYNTAX_LENGTH: int = int(os.getenv("MAX_SYNTAX_LENGTH", "50"))

    # Expiration limits
    MAX_EXPIRATION_MINUTES: int = int(os.getenv("MAX_EXPIRATION_MINUTES", "525600"))
    MAX_VIEWS_LIMIT: int = int(os.getenv("MAX_VIEWS_LIMIT", "1000000"))

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = _env_bool("RATE_LIMIT_ENABLED", "True")
    RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))
    RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    CREATE_RATE_LIMIT_WINDOW_SECONDS: int = int(
        os.getenv("CREATE_RATE_LIMIT_WINDOW_SECONDS", "60")
    )
    CREATE_RATE_LIMIT_MAX_REQUESTS: int = int(
        os.getenv("CREATE_RATE_LIMIT_MAX_REQUESTS", "10")
    )


settings = Settings()
