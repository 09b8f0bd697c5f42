from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for pawpal-backend.

    Common defaults live here; environment variables override per environment.

    Only env vars and optional .env files, no YAML/JSON config.
    """

    # --- Core ---
    environment: str  # required
    service_name: str = "pawpal-backend"

    # --- HTTP server ---
    app_host: str  # required
    app_port: int  # required

    # --- Logging ---
    log_level: str  # required

    # --- Database (PostgreSQL) ---
    pawpal_db_host: str  # required
    pawpal_db_port: int  # required
    pawpal_db_user: str  # required
    pawpal_db_password: str  # required
    pawpal_db_name: str  # required

    # --- Connection pool ---
    pawpal_db_pool_min: int = 1
    pawpal_db_pool_max: int = 10
    # Acquirers allowed to wait once every connection is checked out.
    # 0 rejects immediately instead of queueing.
    pawpal_db_queue_limit: int = 0
    pawpal_db_charset: str = "utf8"
    pawpal_db_acquire_timeout: float = 5.0
    pawpal_db_statement_timeout: float = 30.0

    model_config = SettingsConfigDict(
        # .env.common: shared defaults (committed)
        # .env.local: local overrides (gitignored)
        # Deployed environments have neither and rely on real env vars
        env_file=(".env.common", ".env.local"),
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance. Call this instead of instantiating Settings directly."""
    return Settings()
