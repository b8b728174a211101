"""
Process configuration for the greeting service.
Values are resolved once from the environment at startup and never change.
"""
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_APP_ENV = "local"

# Liveness probes and the Service descriptor both target this port.
HOST = "0.0.0.0"
PORT = 8080

# Level names uvicorn accepts, upper-cased.
LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"]


class Settings(BaseSettings):
    """Environment-derived settings, frozen after construction."""

    model_config = SettingsConfigDict(frozen=True)

    # Injected from the app-config ConfigMap in the cluster.
    app_env: str = DEFAULT_APP_ENV
    log_level: LogLevel = "INFO"

    @field_validator("app_env", mode="before")
    @classmethod
    def _empty_env_is_default(cls, value):
        if value is None or value == "":
            return DEFAULT_APP_ENV
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        if isinstance(value, str):
            return value.upper()
        return value


def load_settings() -> Settings:
    """Resolve settings from the current process environment."""
    return Settings()
