"""Configuration settings for the ledger agent."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Accounting API
    accounting_base_url: str = Field(
        default="https://pouch-account.oreem.com",
        validation_alias="ACCOUNTING_BASE_URL",
    )
    accounting_api_path: str = Field(
        default="/modules/api", validation_alias="ACCOUNTING_API_PATH"
    )
    accounting_timeout: float = Field(default=30.0, validation_alias="ACCOUNTING_TIMEOUT")

    # LLM provider
    llm_provider: Literal["gemini", "claude"] = Field(
        default="gemini", validation_alias="LLM_PROVIDER"
    )
    google_api_key: SecretStr = Field(
        default=SecretStr(""), validation_alias="GOOGLE_API_KEY"
    )
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""), validation_alias="ANTHROPIC_API_KEY"
    )
    gemini_model: str = Field(default="gemini-2.0-flash", validation_alias="GEMINI_MODEL")
    claude_model: str = Field(
        default="claude-haiku-4-5", validation_alias="CLAUDE_MODEL"
    )
    llm_max_tokens: int = Field(default=4096, validation_alias="LLM_MAX_TOKENS")
    llm_temperature: float = Field(default=0.7, validation_alias="LLM_TEMPERATURE")

    # Inbound HTTP surface
    server_host: str = Field(default="0.0.0.0", validation_alias="SERVER_HOST")
    server_port: int = Field(default=4000, validation_alias="SERVER_PORT")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
