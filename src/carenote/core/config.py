"""Application configuration for CareNote services."""
from __future__ import annotations

from functools import lru_cache
import json
import logging
from pathlib import Path
import secrets
from typing import Annotated, List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


logger = logging.getLogger("carenote.config")


def _tolerant_json_loads(value: str):
    """Parse JSON for complex env fields but allow blank strings."""

    if value == "":
        return value
    return json.loads(value)


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        json_loads=_tolerant_json_loads,
    )

    app_name: str = Field(default="CareNote", description="Human readable application name.")
    environment: str = Field(default="development", description="Environment name for telemetry tagging.")
    api_prefix: str = Field(default="/api", description="Prefix for API routes.")
    allowed_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="List of CORS origins allowed to access the API.",
    )
    telemetry_endpoint: str | None = Field(
        default=None,
        description="Optional external telemetry collector endpoint for forwarding events.",
    )
    admin_keys: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Static API keys that can read feedback through the admin routes.",
    )
    report_rate_limit: int = Field(
        default=3,
        ge=1,
        description="Maximum number of report generations admitted per client within one window.",
    )
    report_rate_window_seconds: int = Field(
        default=24 * 60 * 60,
        ge=1,
        description="Length of the report generation quota window.",
    )
    trust_forwarded_for: bool = Field(
        default=False,
        description="Use the first X-Forwarded-For address as the client identity.",
    )
    openai_api_key: str | None = Field(default=None, description="Bearer token for the text generation API.")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI compatible chat completion API.",
    )
    openai_model: str = Field(default="gpt-4o", description="Model used for every generation request.")
    generation_timeout_seconds: float = Field(default=60.0, description="HTTP timeout for generation requests.")
    report_max_tokens: int = Field(default=1000, ge=1)
    translation_max_tokens: int = Field(default=1500, ge=1)
    statement_max_tokens: int = Field(default=800, ge=1)
    database_url: str = Field(
        default="sqlite:///./carenote.db",
        description="Database connection string used for persisting reports and feedback.",
    )
    log_level: str = Field(default="INFO", description="Application log level.")
    master_key: str | None = Field(default=None, description="Admin master key generated automatically if missing.")

    @field_validator("admin_keys", mode="before")
    def _split_admin_keys(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @model_validator(mode="after")
    def _ensure_master_in_keys(self) -> "Settings":
        if self.master_key and self.master_key not in self.admin_keys:
            object.__setattr__(self, "admin_keys", [*self.admin_keys, self.master_key])
        return self


def _persist_master_key(path: Path, key: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        content = path.read_text(encoding="utf-8")
        if "MASTER_KEY" in content:
            return
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"\nMASTER_KEY={key}\n")
    else:
        path.write_text(f"MASTER_KEY={key}\n", encoding="utf-8")


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings and ensure an admin master key exists."""

    settings = Settings()
    if not settings.master_key:
        key = secrets.token_urlsafe(32)
        object.__setattr__(settings, "master_key", key)
        object.__setattr__(settings, "admin_keys", [*settings.admin_keys, key])
        env_file = Path(settings.model_config.get("env_file", ".env"))
        try:
            _persist_master_key(env_file, key)
            logger.warning("Generated new MASTER_KEY and stored it in %s", env_file)
        except OSError as exc:
            logger.error("Failed to persist MASTER_KEY to %s: %s", env_file, exc)
    return settings
