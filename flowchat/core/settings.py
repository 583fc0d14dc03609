from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_DEV_PROXY_URL = "http://127.0.0.1:8080/langflow"


class AppSettings(BaseSettings):
    app_name: str = "Flowchat"
    app_version: str = "0.1.0"
    langflow_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LANGFLOW_BASE_URL", "VITE_LANGFLOW_BASE_URL"),
    )
    langflow_flow_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LANGFLOW_FLOW_ID", "VITE_LANGFLOW_FLOW_ID"),
    )
    langflow_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LANGFLOW_API_KEY", "VITE_LANGFLOW_API_KEY"),
    )
    dev_mode: bool = Field(default=False, validation_alias="DEV_MODE")
    dev_proxy_url: str = Field(
        default=DEFAULT_DEV_PROXY_URL, validation_alias="DEV_PROXY_URL"
    )
    proxy_target_url: str = Field(
        default="http://localhost:7860", validation_alias="PROXY_TARGET_URL"
    )
    proxy_timeout_sec: float = Field(default=180.0, validation_alias="PROXY_TIMEOUT_SEC")
    request_timeout_sec: float = Field(
        default=150.0, gt=0, validation_alias="REQUEST_TIMEOUT_SEC"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["*"], validation_alias="CORS_ALLOWED_ORIGINS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator(
        "langflow_base_url", "langflow_flow_id", "langflow_api_key", mode="before"
    )
    @classmethod
    def _blank_as_missing(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: list[str] | str | None) -> list[str]:
        if value is None:
            return ["*"]
        if isinstance(value, list):
            return value or ["*"]
        if isinstance(value, str):
            candidates = [origin.strip() for origin in value.split(",")]
            cleaned = [origin for origin in candidates if origin]
            return cleaned or ["*"]
        raise TypeError("cors_allowed_origins must be a list or comma separated string.")


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
