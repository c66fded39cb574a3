"""Application settings loaded from environment variables via pydantic-settings.

Values are read, in priority order, from:

  1. Environment variables - e.g. ``FEEDBACK_BACKEND=sqlite``
  2. A ``.env`` file in the working directory (local development)

Field ``feedback_data_file`` maps to env var ``FEEDBACK_DATA_FILE``;
pydantic-settings matches names case-insensitively.  Defaults apply when
neither source sets a value.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Feedback tracker settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Persistence ===
    # "json" writes data/feedback.json, "sqlite" keeps the same document in
    # a SQLite row, "memory" is lost on restart.
    feedback_backend: str = "json"
    feedback_data_file: str = "data/feedback.json"
    feedback_db_path: str = "data/feedback.db"
    persistence_timeout: float = Field(default=5.0, gt=0)
    # Opt-in single-writer lock for create/vote/delete (one process only).
    serialize_writes: bool = False

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3001
    app_env: str = "development"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    def is_production(self) -> bool:
        """Return True when running with production logging and no reload."""
        return self.app_env == "production"
