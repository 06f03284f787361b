"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    ``database_url`` takes any async SQLAlchemy URL; for in-memory SQLite
    the pool settings do not apply.
    """

    data_dir: Path = Path("data")
    database_url: str | None = None
    pool_size: int = 30
    pool_timeout: float = 5.0
    query_timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    app_title: str = "TinyWiki"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="TINYWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    @property
    def resolved_database_url(self) -> str:
        """Return the configured URL, or a SQLite file inside data_dir."""
        if self.database_url:
            return self.database_url
        return f"sqlite+aiosqlite:///{self.data_dir / 'wiki.db'}"


settings = Settings()
