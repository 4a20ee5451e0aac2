"""Configuration for puzzle generation."""

from functools import lru_cache
from typing import Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ShadowConfig(BaseModel):
    """One inner shadow pass drawn along a piece outline."""

    color: Tuple[float, float, float, float] = Field(..., description="RGBA color, each channel in [0, 1]")
    offset: Tuple[float, float] = Field(default=(0.0, 0.0), description="Shadow offset (dx, dy) in points")
    blur_radius: float = Field(default=2.0, ge=0.0, description="Gaussian blur radius in points")

    @field_validator("color")
    @classmethod
    def validate_color(cls, value: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
        """Ensure every color channel lies in [0, 1]."""
        if any(channel < 0.0 or channel > 1.0 for channel in value):
            raise ValueError("Shadow color channels must be between 0 and 1")
        return value


DEFAULT_DARK_SHADOW = ShadowConfig(color=(0.5, 0.5, 0.5, 0.75), offset=(-1.0, -1.0), blur_radius=2.0)
DEFAULT_LIGHT_SHADOW = ShadowConfig(color=(1.0, 1.0, 1.0, 0.75), offset=(1.0, 1.0), blur_radius=2.0)


class Settings(BaseSettings):
    """Puzzle generation settings configuration."""

    # Worker pool used for compositing pieces
    PUZZLE_MAX_WORKERS: int = 4

    # Curve sampling used when rasterizing outlines
    POINTS_PER_CURVE: int = 20

    # Inner shadow passes, dark first then light
    DARK_SHADOW: ShadowConfig = DEFAULT_DARK_SHADOW
    LIGHT_SHADOW: ShadowConfig = DEFAULT_LIGHT_SHADOW

    @field_validator("PUZZLE_MAX_WORKERS")
    @classmethod
    def validate_max_workers(cls, value: int) -> int:
        """Ensure the worker pool can run at least one task."""
        if value < 1:
            raise ValueError("PUZZLE_MAX_WORKERS must be at least 1")
        return value

    @field_validator("POINTS_PER_CURVE")
    @classmethod
    def validate_points_per_curve(cls, value: int) -> int:
        """Ensure every curve is sampled at both ends."""
        if value < 2:
            raise ValueError("POINTS_PER_CURVE must be at least 2")
        return value

    class Config:
        """Pydantic configuration class."""

        case_sensitive = True
        env_file = ".env"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Create instance
settings = get_settings()
