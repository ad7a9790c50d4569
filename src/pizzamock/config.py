"""Configuration management with pydantic-settings."""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PizzamockSettings(BaseSettings):
    """pizzamock settings loaded from environment variables.

    All settings use the PIZZAMOCK_ prefix for environment variables.
    """

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: Literal["console", "json"] = Field(
        default="console",
        description="Log output format: console or json",
    )

    # Session tokens
    token_strategy: Literal["fixed", "random"] = Field(
        default="fixed",
        description="How bearer tokens are issued: fixed (same token every login) or random",
    )
    fixed_token: str = Field(
        default="abcdef",
        description="Token handed out when token_strategy is 'fixed'",
    )

    # Identifier allocation for created stores, franchises, users and orders
    id_strategy: Literal["random", "sequential"] = Field(
        default="random",
        description="Id allocation: random (0-999, collision-free) or sequential (max + 1)",
    )
    id_seed: int | None = Field(
        default=None,
        description="Seed for random id allocation (unseeded when unset)",
    )

    # Interception
    intercept_pattern: str = Field(
        default="**/api/**",
        description="Playwright URL glob routed through the simulator",
    )
    base_url: str = Field(
        default="http://localhost:5173",
        description="Storefront URL the pytest plugin navigates to after installing the mock",
    )
    har_dir: Path | None = Field(
        default=None,
        description="Directory for per-test HAR exports written when the pizza_backend fixture finishes",
    )

    model_config = SettingsConfigDict(
        env_prefix="PIZZAMOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("fixed_token")
    @classmethod
    def _token_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("fixed_token must be a non-empty string")
        return value

    def as_display_dict(self) -> dict[str, Any]:
        """Return settings as a flat dict for the ``config`` CLI command."""
        return {name: getattr(self, name) for name in type(self).model_fields}


# Global settings instance
_settings: PizzamockSettings | None = None


def get_settings() -> PizzamockSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = PizzamockSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
