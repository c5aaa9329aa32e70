from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"


class Settings(BaseSettings):
    """Client configuration loaded from environment variables."""

    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "api_key"),
    )
    default_model: str = Field(
        default="gemini-1.5-flash", validation_alias=AliasChoices("GEMINI_MODEL", "default_model"),
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL, validation_alias=AliasChoices("GEMINI_BASE_URL", "base_url"),
    )
    api_version: Literal["v1", "v1beta"] = Field(
        default="v1beta", validation_alias=AliasChoices("GEMINI_API_VERSION", "api_version"),
    )
    request_timeout: float = Field(
        default=60.0, gt=0.0, validation_alias=AliasChoices("GEMINI_REQUEST_TIMEOUT", "request_timeout"),
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    log_destination: Literal["stdout", "file", "both"] = Field(
        default="stdout", validation_alias=AliasChoices("LOG_DESTINATION", "log_destination"),
    )
    log_file_path: str = Field(
        default="logs/app.log", validation_alias=AliasChoices("LOG_FILE_PATH", "log_file_path"),
    )
    log_verbose: bool = Field(default=False, validation_alias=AliasChoices("LOG_VERBOSE", "log_verbose"))
    allow_sensitive_logging: bool = Field(
        default=False,
        validation_alias=AliasChoices("ALLOW_SENSITIVE_LOGGING", "allow_sensitive_logging"),
    )
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Normalize the base URL so paths can be appended with a single slash."""
        stripped = value.rstrip("/")
        if not stripped:
            message = "GEMINI_BASE_URL must not be empty"
            raise ValueError(message)
        return stripped


settings = Settings()
