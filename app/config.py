"""
Application configuration using Pydantic Settings.
"""

import os
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


def get_env_file() -> str:
    """Determine which env file to use based on environment."""
    env = os.getenv("APP_ENV", "development")
    if env == "production":
        return ".env.production"
    return ".env.development"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = {
        "env_file": get_env_file(),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # App settings
    app_name: str = "TVM Engine"
    debug: bool = False
    log_level: str = "INFO"
    app_env: str = "development"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Rate solver bounds (I/Y and IRR)
    newton_lower_bound: float = -0.99
    newton_upper_bound: float = 10.0
    bisection_lower_bound: float = -0.99
    bisection_upper_bound: float = 2.0
    bisection_probes: List[float] = [-0.5, 0.0, 0.01, 0.1, 0.5, 1.0, 1.5]

    def root_policy_overrides(self) -> dict:
        """Keyword overrides for a RootPolicy built from these settings."""
        return {
            "lower_bound": self.newton_lower_bound,
            "upper_bound": self.newton_upper_bound,
            "bracket": (self.bisection_lower_bound, self.bisection_upper_bound),
            "probes": tuple(self.bisection_probes),
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
