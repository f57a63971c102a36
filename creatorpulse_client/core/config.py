"""
Client service layer configuration settings.
"""
from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service layer settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Remote backend
    api_base_url: str = Field(
        default="http://localhost:8000/v1",
        description="Base URL of the CreatorPulse API",
    )
    remote_enabled: bool = Field(default=True, description="Try the remote API before simulating")
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Session
    session_storage_path: Optional[str] = Field(
        default=None,
        description="JSON file holding the persisted session; in-memory when unset",
    )
    session_ttl_hours: int = Field(default=24, ge=1)

    # Simulation
    simulated_failure_rate: float = Field(default=0.05, ge=0.0, le=1.0)
    simulation_seed: Optional[int] = Field(default=None)
    simulate_latency: bool = Field(default=True)
    seed_demo_data: bool = Field(default=True)

    # Style training simulator
    training_start_delay_seconds: float = Field(default=1.0, ge=0.0)
    training_tick_seconds: float = Field(default=2.0, gt=0.0)

    # Draft generation guard
    recent_drafts_window_hours: int = Field(default=6, ge=0)
    recent_drafts_limit: int = Field(default=5, ge=1)

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Clear with get_settings.cache_clear() when the environment changes.
    """
    return Settings()
