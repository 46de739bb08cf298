"""Application settings loaded from the environment, .env, and the per-user config file."""

import json
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .models import DEFAULT_API_HOST

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config/github-rest-invoker"
CONFIG_DIR_ENV_VAR = "GITHUB_REST_CONFIG_DIR"
CONFIG_FILE_NAME = "config.json"
LOG_FILE_NAME = "github-rest-invoker.log"


def config_dir() -> Path:
    """Directory holding the config file, token file, and default log."""
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_DIR


def config_path() -> Path:
    return config_dir() / CONFIG_FILE_NAME


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    """Read persisted settings. Unreadable or malformed files count as empty."""
    path = path or config_path()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: expected a JSON object", path)
        return {}
    return data


def write_config_file(values: dict[str, Any], path: Path | None = None):
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(values, f, indent=2, sort_keys=True)


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Lowest-priority source: values persisted with ``set_config``."""

    def get_field_value(self, field, field_name):
        # Values are produced all at once by __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        fields = self.settings_cls.model_fields
        return {k: v for k, v in read_config_file().items() if k in fields}


class Settings(BaseSettings):
    """Settings for the GitHub REST invoker."""

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_REST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    api_host_name: str = DEFAULT_API_HOST
    default_owner_name: str | None = None
    default_repository_name: str | None = None

    disable_logging: bool = False
    log_path: Path | None = None
    log_process_id: bool = False
    log_request_body: bool = False
    log_time_as_utc: bool = False

    disable_telemetry: bool = False
    application_insights_key: str | None = None
    disable_pii_protection: bool = False
    disable_pipeline_support: bool = False
    disable_smarter_objects: bool = False
    suppress_no_token_warning: bool = False

    maximum_retries_when_result_not_ready: int = Field(default=30, ge=0)
    retry_delay_seconds: float = Field(default=30, ge=0)
    web_request_timeout_sec: float = Field(default=0, ge=0)
    multi_request_progress_threshold: int = Field(default=10, ge=0)
    state_change_delay_seconds: float = Field(default=0, ge=0)

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("github_token", "GITHUB_TOKEN"),
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            ConfigFileSettingsSource(settings_cls),
        )

    @property
    def resolved_log_path(self) -> Path:
        return self.log_path or config_dir() / LOG_FILE_NAME

    @property
    def timeout(self) -> float | None:
        """Transport timeout for httpx; 0 means wait indefinitely."""
        return self.web_request_timeout_sec or None


# Settings that are never written to the config file
NON_PERSISTED_SETTINGS = frozenset({"github_token"})


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
