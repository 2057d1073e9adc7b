"""Application configuration with environment variable validation."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to the project root (3 levels up from this file)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord
    discord_token: str = Field(default="", validation_alias="DISCORD_TOKEN")
    discord_token_dev: str = Field(default="", validation_alias="DISCORD_TOKEN_DEV")
    discord_application_id: str = Field(
        default="", validation_alias="DISCORD_APPLICATION_ID"
    )
    discord_public_key: str = Field(default="", validation_alias="DISCORD_PUBLIC_KEY")
    discord_api_base_url: str = Field(
        default="https://discord.com/api/v10",
        validation_alias="DISCORD_API_BASE_URL",
    )
    register_commands_on_startup: bool = Field(
        default=True, validation_alias="REGISTER_COMMANDS_ON_STARTUP"
    )

    # Supabase
    supabase_url: str = Field(default="", validation_alias="SUPABASE_URL")
    supabase_key: str = Field(default="", validation_alias="SUPABASE_KEY")
    tunes_table: str = Field(default="tunes", validation_alias="TUNES_TABLE")

    # Server
    port: int = Field(default=8080, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")

    @property
    def bot_token(self) -> str:
        """Token for the active mode (DISCORD_TOKEN_DEV when running with --dev)."""
        return self.discord_token_dev if self.dev_mode else self.discord_token

    @property
    def token_env_name(self) -> str:
        return "DISCORD_TOKEN_DEV" if self.dev_mode else "DISCORD_TOKEN"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def validate_settings(settings: Settings | None = None) -> None:
    """Validate that all required settings are present."""
    settings = settings or get_settings()
    errors = []

    if not settings.bot_token:
        mode = "dev mode" if settings.dev_mode else "production"
        errors.append(f"{settings.token_env_name} is required for {mode}")
    if not settings.discord_application_id:
        errors.append("DISCORD_APPLICATION_ID is required")
    if not settings.discord_public_key:
        errors.append("DISCORD_PUBLIC_KEY is required")
    if not settings.supabase_url:
        errors.append("SUPABASE_URL is required")
    if not settings.supabase_key:
        errors.append("SUPABASE_KEY is required")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")
