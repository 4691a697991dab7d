"""
Configuration
=============

Settings loaded from environment variables (and a `.env` file, if present).

Environment Variables:
    DATABASE_URL: SQLAlchemy URL of the measurement database
                  (default: sqlite:///./tempmon.db)
    API_HOST: Address uvicorn binds to (default: 0.0.0.0)
    API_PORT: Port uvicorn listens on (default: 9247)
    CORS_ORIGINS: Comma-separated allowed origins (default: *)
    LOG_LEVEL: Root log level (default: INFO)
    DEFAULT_PAGE_SIZE: Page size when `limit` is omitted (default: 100)
    DEFAULT_WINDOW_HOURS: Length of the default time window (default: 24)

Settings are read ONCE at startup and handed to the store and the app.
Nothing reads the environment after that.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite:///./tempmon.db"


@dataclass(frozen=True)
class Settings:
    """Application configuration."""

    database_url: str = DEFAULT_DATABASE_URL
    api_host: str = "0.0.0.0"
    api_port: int = 9247
    cors_origins: str = "*"
    log_level: str = "INFO"
    default_page_size: int = 100
    default_window_hours: int = 24

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS_ORIGINS split into a list, blanks dropped."""
        origins = [o.strip() for o in self.cors_origins.split(",")]
        return [o for o in origins if o] or ["*"]

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from the environment.

        Args:
            load_env_file: Load a `.env` file into the environment first

        Returns:
            A populated Settings instance

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        if load_env_file:
            load_dotenv()

        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", "9247")),
            cors_origins=os.getenv("CORS_ORIGINS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "100")),
            default_window_hours=int(os.getenv("DEFAULT_WINDOW_HOURS", "24")),
        )
