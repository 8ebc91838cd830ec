from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Database settings (credentials MUST be provided via environment
    # unless DB_URL points at a complete connection string)
    DB_URL: str | None = None
    DB_USER: str = ""
    DB_PASSWORD: SecretStr = SecretStr("")
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "member-search-db"
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600
    DB_POOL_PRE_PING: bool = True
    DB_ECHO: bool = False

    # Content and count queries of one page share a transaction at this level
    DB_READ_ISOLATION_LEVEL: str = "REPEATABLE READ"

    @property
    def DATABASE_URL(self) -> str:
        """Construct the database URL from individual components."""
        if self.DB_URL:
            return self.DB_URL

        password = self.DB_PASSWORD.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.DB_USER}:{password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # Database initialization settings
    DB_INIT_RETRY_INTERVAL: int = 2
    DB_INIT_MAX_RETRIES: int = 5

    # Statements slower than this are logged as warnings
    SLOW_QUERY_THRESHOLD_MS: int = 100

    # Pagination defaults
    DEFAULT_PAGE_SIZE: int = 20

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str | None = None


app_settings = Settings()
