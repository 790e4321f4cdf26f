"""Configuration management with pydantic-settings."""

from typing import Any

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from harmatch.exceptions import OracleUnavailableError


class HarmatchSettings(BaseSettings):
    """harmatch application settings loaded from environment variables.

    All settings use the HARMATCH_ prefix for environment variables. The
    OpenAI key is additionally read from the conventional OPENAI_API_KEY.
    """

    # Classifier oracle
    openai_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("HARMATCH_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="API key for the OpenAI completion endpoint",
    )
    openai_model: str = Field(
        default="gpt-5-mini",
        description="Model used for classification calls",
    )
    openai_temperature: float = Field(
        default=1.0,
        description="Sampling temperature for classification calls",
    )

    # Pipeline limits
    max_payload_chars: int = Field(
        default=100_000,
        description="Serialized JSON characters allowed per classification call",
    )
    max_post_data_chars: int = Field(
        default=4096,
        description="Post-data text ceiling in minimized candidates",
    )
    max_har_bytes: int = Field(
        default=100 * 1024 * 1024,  # 100 MB
        description="Largest HAR file accepted",
    )
    max_workers: int = Field(
        default=4,
        description="Concurrent per-batch classification calls (1 = sequential)",
    )

    # Logging configuration
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: str = Field(default="console", description="Log format: console or json")

    model_config = SettingsConfigDict(
        env_prefix="HARMATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("max_payload_chars", "max_post_data_chars", "max_har_bytes", "max_workers")
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    def get_oracle_config(self) -> dict[str, Any]:
        """Get classifier oracle configuration.

        Returns:
            Keyword arguments for ``OpenAIClassifier``.

        Raises:
            OracleUnavailableError: If no API key is configured.
        """
        key = self.openai_api_key.get_secret_value().strip() if self.openai_api_key else ""
        if not key:
            raise OracleUnavailableError(
                "OpenAI API key is not configured. Set OPENAI_API_KEY or HARMATCH_OPENAI_API_KEY."
            )
        return {
            "api_key": key,
            "model": self.openai_model,
            "temperature": self.openai_temperature,
        }


# Global settings instance
_settings: HarmatchSettings | None = None


def get_settings() -> HarmatchSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = HarmatchSettings()
    return _settings


def reset_settings() -> None:
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None
