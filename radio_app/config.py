"""Application settings loaded from .env via pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration: values come from environment / .env file."""

    # App
    app_title: str = "Liquid Radio"
    version: str = "1.2.0"
    environment: str = "development"  # "development" | "production"
    log_level: str = ""  # empty → DEBUG in development, INFO in production

    # Storage (stands in for the browser's local storage)
    db_path: str = "./data/liquidradio.db"
    storage_enabled: bool = True

    # Stations
    stations_file: str = ""  # JSON array of seed records; empty → built-in list
    default_station: str = "liquid_radio"
    start_path: str = "/"

    # Editor
    title_max_length: int = 20
    # Legacy id derivation replaces only the first space of a title.
    replace_all_spaces_in_ids: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def db_abs_path(self) -> Path:
        """Return the database path as an absolute Path, creating parents if needed."""
        p = Path(self.db_path)
        p.parent.mkdir(parents=True, exist_ok=True)
        return p.resolve()

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "INFO" if self.environment == "production" else "DEBUG"


@lru_cache
def get_settings() -> Settings:
    """Cached singleton so .env is read only once."""
    return Settings()
