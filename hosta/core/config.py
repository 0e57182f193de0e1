"""
Configuration management using Pydantic Settings
"""
import os
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, TYPE_CHECKING

from dotenv import find_dotenv, load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from hosta.models.base_model import Model
    from hosta.pipelines.simple_pipeline import OneTurnConversationPipeline


def _find_env_file(start: Optional[Path] = None) -> Optional[Path]:
    """Walk up from start (default: cwd) and return the first .env found"""
    current = (start or Path.cwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate
    return None


ENV_FILE = _find_env_file()
if ENV_FILE is not None:
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    """Library settings, read from HOSTA_* environment variables"""

    # Default model
    default_model_name: str = Field(default="gpt-4o", description="Model used by the default configuration")
    default_model_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible endpoint"
    )
    default_model_api_key: Optional[str] = Field(default=None, description="API key for the default model")
    default_model_temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    default_model_top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    default_model_max_tokens: Optional[int] = Field(default=None, ge=1)
    default_model_seed: Optional[int] = Field(default=None)
    request_timeout_seconds: float = Field(default=120.0, gt=0, description="HTTP timeout for model calls")

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level of the hosta logger tree")
    log_format: str = Field(
        default="text",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"hosta.pipelines": "DEBUG"})'
    )
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (API keys, tokens) - NOT RECOMMENDED"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case and validate the log level name"""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @property
    def default_api_parameters(self) -> Dict[str, Any]:
        """Sampling parameters set through the environment"""
        params = {
            "temperature": self.default_model_temperature,
            "top_p": self.default_model_top_p,
            "max_tokens": self.default_model_max_tokens,
            "seed": self.default_model_seed,
        }
        return {key: value for key, value in params.items() if value is not None}

    model_config = SettingsConfigDict(
        env_prefix="HOSTA_",
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def reload_dotenv(dotenv_path: Optional[str] = None, override: bool = True) -> bool:
    """
    Load a .env file into the environment and drop cached settings

    Args:
        dotenv_path: Explicit path; when omitted the nearest .env above cwd is used
        override: Overwrite variables already present in os.environ

    Returns:
        True if a file was found and loaded
    """
    path = dotenv_path if dotenv_path and os.path.isfile(dotenv_path) else find_dotenv(usecwd=True)
    if not path:
        return False
    loaded = load_dotenv(path, override=override)
    get_settings.cache_clear()
    reset_default_config()
    return loaded


class HostaConfig:
    """
    Explicit configuration handed to emulate/closure/ask

    Holds the model used for direct calls and the pipeline used for emulation.
    """

    def __init__(self, model: "Model", pipeline: Optional["OneTurnConversationPipeline"] = None):
        from hosta.pipelines.simple_pipeline import OneTurnConversationPipeline

        self.model = model
        self.pipeline = pipeline or OneTurnConversationPipeline(model_list=[model])

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "HostaConfig":
        """Build a config around an OpenAI-compatible model described by settings"""
        from hosta.models.openai_compatible import OpenAICompatibleModel

        settings = settings or get_settings()
        model = OpenAICompatibleModel(
            model_name=settings.default_model_name,
            base_url=settings.default_model_base_url,
            api_key=settings.default_model_api_key,
            api_parameters=settings.default_api_parameters,
            timeout=settings.request_timeout_seconds,
        )
        return cls(model=model)


_default_config: Optional[HostaConfig] = None
_default_lock = threading.Lock()


def default_config() -> HostaConfig:
    """
    Process-wide convenience configuration, built lazily from Settings

    Nothing in hosta requires it: every entry point accepts an explicit config.
    """
    global _default_config
    with _default_lock:
        if _default_config is None:
            _default_config = HostaConfig.from_settings()
        return _default_config


def set_default_config(config: HostaConfig) -> None:
    """Replace the process-wide convenience configuration"""
    global _default_config
    with _default_lock:
        _default_config = config


def reset_default_config() -> None:
    """Forget the process-wide configuration; it is rebuilt on next use"""
    global _default_config
    with _default_lock:
        _default_config = None
