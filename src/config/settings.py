"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first):

  1. **Environment variables** -- e.g. ``LASTFM_API_KEY=abc123``
  2. **.env file** -- local developer overrides, never committed
  3. The defaults declared below

Field ``lastfm_api_key`` maps to env var ``LASTFM_API_KEY``; pydantic-settings
matches names case-insensitively.  Sweep behaviour (tags, intervals) lives in
``config/config.yaml`` and is merged in by :mod:`src.config.loader`.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.errors import ConfigurationError


class Settings(BaseSettings):
    """cratedigger runtime settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Last.fm (metadata source) ===
    # Empty string = "not configured".  The scheduler refuses to start
    # without it; the seed loader does not need it.
    lastfm_api_key: str = ""
    lastfm_base_url: str = "http://ws.audioscrobbler.com/2.0/"

    # === Embeddings (Ollama, nomic-embed-text) ===
    ollama_base_url: str = "http://localhost:11434"
    embedding_model: str = "nomic-embed-text"
    embedding_dimension: int = 768

    # === Vector store ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "albums"

    # === Sweep configuration file ===
    digging_config_path: str = "config/config.yaml"

    # Applied to every outbound call (Last.fm, Ollama).
    http_timeout_seconds: float = 30.0

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"

    def require_api_key(self) -> str:
        """Return the Last.fm API key or raise :class:`ConfigurationError`."""
        key = self.lastfm_api_key.strip()
        if not key:
            raise ConfigurationError(
                message="LASTFM_API_KEY is not set; the ingestion worker cannot start",
                provider_name="lastfm",
            )
        return key
