from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = ConfigDict(env_file=".env", case_sensitive=True)

    DATABASE_URL: str
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Connection pool sizing for the async engine
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Mount point for all routers ("" serves /rules, /auth, /health at the root)
    API_PREFIX: str = ""

    # Session cookie configuration
    SESSION_COOKIE_NAME: str = "mpt_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7  # 7 days
    FORCE_SECURE_COOKIES: bool = False

    # PBKDF2 iterations for new password hashes
    PASSWORD_HASH_ROUNDS: int = 120_000

    # Rate limiting on the signup / login endpoints
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "10/minute"

    # CORS configuration, comma-separated origins
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8501"


settings = Settings()
