"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Floq vibe server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the tools.
    floq_host: str = "127.0.0.1"
    floq_port: int = 8011
    floq_log_level: str = "info"
    floq_allow_insecure_bind: bool = False

    # Vibe engine
    # Pattern-usage flag. Accepts on/off, true/false, 1/0.
    vibe_patterns: bool = False
    vibe_tuning_path: str = ""

    # Learning
    learning_event_max_age_days: float = 7.0
    pattern_history_limit: int = 200


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
