"""Configuration management for the XSS Defender service.

This module defines the Pydantic settings and request models used by the
HTTP layer. Security behaviour (strategy, toggles) lives in the YAML policy,
see `app.policy`; these settings only say where to find it and how to run.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables.

    Attributes:
        PROJECT_NAME (str): The name of the application.
        POLICY_PATH (str): Path to the YAML defender policy.
        LOG_LEVEL (str): Root logging level for the service.
    """
    PROJECT_NAME: str = "XSS Defender"

    POLICY_PATH: str = "xss-defender.yaml"
    LOG_LEVEL: str = "INFO"

    # This allows loading from a .env file automatically
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        # logging only accepts upper-case level names
        return value.strip().upper()


class TextPayload(BaseModel):
    """A single untrusted value to defend."""
    text: Optional[str] = None


class DataPayload(BaseModel):
    """Represents a JSON document whose string values must be defended.

    Attributes:
        payload (Dict[str, Any]): The data content. Every string value, at
            any nesting depth, goes through the defender.
    """
    payload: Dict[str, Any]


settings = Settings()
