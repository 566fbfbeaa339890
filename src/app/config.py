"""Configuration management using Pydantic settings."""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bastion.simulation.tuning import DEFAULT_VARIANT, VARIANTS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "BASTION"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Simulation engine
    simulation_enabled: bool = True
    simulation_variant: str = DEFAULT_VARIANT  # outpost | lancer | arsenal
    simulation_frame_rate: float = 60.0     # frames per second driven by the server
    simulation_max_frame_time: float = 0.1  # largest delta a single tick may simulate
    simulation_seed: Optional[int] = None   # fixed seed for reproducible spawn edges

    # Viewport the engine scales against (design size is 960x540)
    viewport_width: float = 960.0
    viewport_height: float = 540.0

    @field_validator("simulation_variant")
    @classmethod
    def _known_variant(cls, value: str) -> str:
        name = value.lower()
        if name not in VARIANTS:
            raise ValueError(f"unknown variant {value!r}; expected one of {sorted(VARIANTS)}")
        return name

    @field_validator(
        "simulation_frame_rate", "simulation_max_frame_time",
        "viewport_width", "viewport_height",
    )
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be positive")
        return value


settings = Settings()
