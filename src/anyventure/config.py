"""Configuration management for the Anyventure engine using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="ANYVENTURE_",
        extra="ignore",
    )

    # Content
    content_dir: Path = Field(
        default=Path("./data/content"),
        description="Directory holding item, module and injury YAML files",
    )

    # Movement
    default_walk_speed: int = Field(default=5, description="Walk speed when none is recorded")
    prone_walk_speed: int = Field(default=1, description="Walk speed cap while prone")
    immobilizing_conditions: list[str] = Field(
        default_factory=lambda: ["incapacitated", "stunned", "immobilized"],
        description="Conditions that force walk speed to 0",
    )

    # Resources
    base_spell_slots: int = Field(
        default=10, description="Spell slots before spell capacity bonuses"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Log format (console or json)")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
