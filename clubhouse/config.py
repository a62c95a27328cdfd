"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{os.getenv('DATABASE_PATH', 'clubhouse.db')}")

    # JWT settings (tokens are issued elsewhere, we only verify them)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Comma-separated extra CORS origins
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    # Stats
    RECENT_MATCHES_LIMIT: int = int(os.getenv("RECENT_MATCHES_LIMIT", "5"))
    MOM_WICKET_WEIGHT: int = int(os.getenv("MOM_WICKET_WEIGHT", "1"))
    MOM_ATTRIBUTION: str = os.getenv("MOM_ATTRIBUTION", "name")  # "name" or "id"


settings = Settings()
