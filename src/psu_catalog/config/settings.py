from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Every value can be overridden through an environment variable of the same
    name or through the `.env` file at the project root.
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"
    SERVICE_NAME: str = "psu-catalog"

    # Database configuration
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "psu_catalog"

    # Full SQLAlchemy URL; when set it wins over the POSTGRES_* pieces
    DB_URL: str | None = None

    # Connection pool
    DB_POOL_SIZE: int = 10          # connections kept open (max idle)
    DB_MAX_OVERFLOW: int = 20       # extra connections on burst (max open = size + overflow)
    DB_POOL_RECYCLE: int = 3600     # seconds before a connection is replaced (max lifetime)
    DB_QUERY_TIMEOUT: float | None = 30.0
    DB_AUTO_MIGRATE: bool = True

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Auth
    JWT_SECRET: str = "change-me"
    JWT_EXPIRE_HOURS: int = 24
    BCRYPT_ROUNDS: int = 12

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/psu-catalog")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL the engine should connect to.

        `DB_URL` is used verbatim when provided (handy for SQLite in tests or
        a managed database DSN); otherwise the URL is assembled from the
        POSTGRES_* settings.
        """
        if self.DB_URL:
            return self.DB_URL

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str | None) -> str | None:
        # logging expects upper-case level names ("DEBUG", "INFO", ...)
        return v.upper() if isinstance(v, str) else v

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def normalize_log_format(cls, v: str | None) -> str | None:
        return v.lower() if isinstance(v, str) else v

    model_config = SettingsConfigDict(
        # .env at the project root (three levels up from this file: config -> psu_catalog -> src -> root)
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Process-wide settings from the environment; create_app() also accepts an explicit instance.
@lru_cache()
def get_settings() -> Settings:
    return Settings()
