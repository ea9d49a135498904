"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # World
    world_file: str | None = None  # Default world for `somnium play`

    # ==========================================================================
    # Parser
    # ==========================================================================
    verb_window: int = 3  # Max tokens tried for a multi-word verb

    # ==========================================================================
    # Puzzles
    # ==========================================================================
    hint_cooldown_seconds: float = 30.0
    hint_after_attempts: int = 3  # Failed single-step attempts before hints are offered

    # ==========================================================================
    # Progression
    # ==========================================================================
    score_milestones: list[int] = Field(default_factory=lambda: [100, 250, 500, 1000])
    meta_achievement_thresholds: dict[int, str] = Field(
        default_factory=lambda: {10: "achievement_hunter", 25: "achievement_master"}
    )
    perfect_score_achievement: str = "perfect_score"
    par_moves_achievement: str = "par_moves"
    default_ending: str = "default"
    failure_ending: str = "failure"

    # Debug
    debug: bool = False
    log_level: LogLevel = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
