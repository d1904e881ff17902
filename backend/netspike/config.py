# =============================================================================
# NetSpike - Service Settings
# =============================================================================
"""
Environment-driven settings for the HTTP service and the CLI.

Every field can be overridden with an environment variable carrying the
``NETSPIKE_`` prefix, e.g. ``NETSPIKE_PORT=9000``. List fields take JSON.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    DEFAULT_MODIFIER: str = ""
    MAX_SESSIONS: int = 100

    model_config = {"env_prefix": "NETSPIKE_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
