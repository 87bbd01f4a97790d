from psu_catalog.config import Settings


def test_database_url_is_assembled_from_postgres_settings():
    settings = Settings(
        DB_URL=None,
        POSTGRES_USERNAME="catalog",
        POSTGRES_PASSWORD="pw",
        POSTGRES_HOST="db",
        POSTGRES_PORT=5433,
        POSTGRES_DB="psu",
    )

    assert settings.DATABASE_URL == "postgresql+psycopg://catalog:pw@db:5433/psu"


def test_db_url_wins_over_postgres_settings():
    settings = Settings(DB_URL="sqlite+aiosqlite:///:memory:", POSTGRES_HOST="ignored")
    assert settings.DATABASE_URL == "sqlite+aiosqlite:///:memory:"


def test_log_level_and_format_are_normalized():
    settings = Settings(LOG_LEVEL="debug", LOG_FORMAT="TEXT")

    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.LOG_FORMAT == "text"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("JWT_EXPIRE_HOURS", "48")
    monkeypatch.setenv("DB_POOL_SIZE", "3")

    settings = Settings()

    assert settings.JWT_EXPIRE_HOURS == 48
    assert settings.DB_POOL_SIZE == 3
