import logging
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rp_roster.models.enums import TokenSource


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Card board configuration
    trello_board_id: Optional[str] = Field(
        None, description="Identifier of the board whose cards make up the roster."
    )
    amazing_fields_token: Optional[str] = Field(
        None, description="Token for the Amazing Fields board API."
    )
    card_api_base_url: str = Field(
        "https://api.amazingpowerups.com/api/data/v1",
        description="Base URL of the card board API.",
    )

    # Identity resolution
    identity_api_url: str = Field(
        "https://users.roblox.com/v1/usernames/users",
        description="Batched username lookup endpoint.",
    )
    identity_field_names: List[str] = Field(
        default_factory=lambda: ["IGN", "Honorary Titles"],
        description="Structured field names that carry the identity token.",
    )
    description_token_key: str = Field(
        "IGN", description="Description key that carries the identity token."
    )
    token_priority: List[TokenSource] = Field(
        default_factory=lambda: [TokenSource.STRUCTURED_FIELD, TokenSource.DESCRIPTION],
        description="Order in which token sources are tried for each card.",
    )

    # Cache configuration
    cache_ttl_seconds: int = Field(
        3600, ge=1, description="Lifetime of a cached roster, in seconds."
    )
    coalesce_cache_misses: bool = Field(
        False,
        description="Share one in-flight computation between concurrent misses.",
    )
    supabase_url: Optional[str] = Field(
        None, description="URL for the Supabase project backing the cache."
    )
    supabase_key: Optional[str] = Field(
        None, description="Key for the Supabase project backing the cache."
    )
    cache_table: str = Field("kv_cache", description="Supabase table for cache rows.")

    # HTTP
    http_timeout_seconds: float = Field(30.0, gt=0)
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
