# src/settings.py
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from src.errors import ConfigError

DEFAULT_CONFIG_PATH = "config.yaml"

# keys accepted from older config.yaml files
LEGACY_KEYS = {
    "tgToken": "TELEGRAM_TOKEN",
    "gptToken": "GENERATION_API_KEY",
    "preamble": "PREAMBLE",
}


class Settings(BaseSettings):
    # core
    APP_NAME: str = Field(default="Story Bot")
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # secrets
    TELEGRAM_TOKEN: Optional[str] = None
    GENERATION_API_KEY: Optional[str] = None

    # prompt
    PREAMBLE: str = ""
    COMMANDS: Dict[str, str] = Field(default_factory=lambda: {"/topic": "TOPIC", "/phrase": "PHRASE"})

    # generation backend: gemini | openai | echo
    GENERATION_BACKEND: str = "gemini"
    GENERATION_MODEL: Optional[str] = None
    TEMPERATURE: Optional[float] = None
    MAX_TOKENS: Optional[int] = None
    GENERATION_TIMEOUT: float = Field(default=60.0, gt=0)

    # telegram
    TELEGRAM_API_URL: str = "https://api.telegram.org"
    DELIVERY_TIMEOUT: float = Field(default=15.0, gt=0)
    POLL_TIMEOUT: int = Field(default=60, ge=0)
    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_SECRET: Optional[str] = None

    # pipeline
    WORKER_COUNT: int = Field(default=10, ge=1)        # parallel generation calls
    DISPATCHER_COUNT: int = Field(default=10, ge=1)    # parallel delivery calls
    INTAKE_QUEUE_SIZE: int = Field(default=100, ge=0)  # 0 = unbounded
    OUTTAKE_QUEUE_SIZE: int = Field(default=100, ge=0)
    ANNOTATE_RESPONSES: bool = False

    # environment wins over the config file, which is passed as init kwargs
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @property
    def app_name(self) -> str:
        return self.APP_NAME


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")

    values: Dict[str, Any] = {}
    for key, value in data.items():
        name = LEGACY_KEYS.get(key, str(key).upper())
        values[name] = value
    return values


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Load settings once at startup: config file first, environment on top.

    Raises ConfigError when the result is unusable.
    """
    path = Path(config_path or os.getenv("STORYBOT_CONFIG", DEFAULT_CONFIG_PATH))
    values = _read_config_file(path)
    try:
        settings = Settings(**values)
    except (ValidationError, SettingsError) as e:
        raise ConfigError(f"invalid configuration: {e}") from e

    if not settings.TELEGRAM_TOKEN:
        raise ConfigError("TELEGRAM_TOKEN is not set (tgToken in config.yaml)")
    backend = settings.GENERATION_BACKEND.lower()
    if backend not in ("gemini", "openai", "echo"):
        raise ConfigError(f"unknown GENERATION_BACKEND: {settings.GENERATION_BACKEND}")
    if backend != "echo" and not settings.GENERATION_API_KEY:
        raise ConfigError("GENERATION_API_KEY is not set (gptToken in config.yaml)")
    if not settings.COMMANDS:
        raise ConfigError("COMMANDS must map at least one prefix to a label")
    return settings
