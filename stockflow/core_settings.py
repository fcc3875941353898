from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "stockflow"
    POSTGRES_USER: str = "stockflow"
    POSTGRES_PASSWORD: str = "stockflow"
    # Full SQLAlchemy URL; overrides the POSTGRES_* parts when set (e.g. sqlite for tests)
    DATABASE_URL: Optional[str] = None

    SERVICE_NAME: str = "stockflow"
    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    # Rotating JSON log file in addition to stdout
    LOG_FILE: Optional[str] = None
    RUN_MIGRATIONS: bool = True

    SALES_WINDOW_DAYS: int = 30

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
