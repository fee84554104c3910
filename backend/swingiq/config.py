from dataclasses import replace
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from swingiq.core.domain.config import EngineConfig, DEFAULT_CONFIG


class Settings(BaseSettings):
    app_name: str = "SwingIQ API"
    version: str = "1.0.0"
    environment: str = "development"
    log_level: str = "INFO"

    cors_origins: List[str] = [
        "http://localhost:3000",      # React dev server
        "http://localhost:5173",      # Vite dev server
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    # Engine
    history_capacity: int = DEFAULT_CONFIG.history_capacity
    frame_timeout_seconds: float = DEFAULT_CONFIG.frame_timeout

    model_config = SettingsConfigDict(env_prefix="SWINGIQ_", env_file=".env", extra="ignore")

    @property
    def logging_level(self) -> str:
        return self.log_level.upper()

    def engine_config(self) -> EngineConfig:
        return replace(
            DEFAULT_CONFIG,
            history_capacity=self.history_capacity,
            frame_timeout=self.frame_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
