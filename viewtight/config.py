"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from viewtight.engine.config import EngineConfig


class Settings(BaseSettings):
    viewtight_env: str = "development"
    viewtight_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Engine defaults for requests that don't override them
    default_buffer_px: float = 10.0
    samples_per_segment: int = 32
    motion_samples: int = 64

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def engine_config(self, **overrides) -> EngineConfig:
        params = {
            "buffer_px": self.default_buffer_px,
            "samples_per_segment": self.samples_per_segment,
            "motion_samples": self.motion_samples,
        }
        params.update({k: v for k, v in overrides.items() if v is not None})
        return EngineConfig(**params)


settings = Settings()
