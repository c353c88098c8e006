"""
Configuration management.

Uses Pydantic Settings for environment variable handling and validation,
with an optional YAML file providing defaults that env vars override.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    if config_path is None:
        config_path = os.environ.get("BILLGUARD_CONFIG_FILE")

    if config_path is None:
        # Look for billguard.yaml in common locations
        possible_paths = [
            "billguard.yaml",  # Current directory
            "../../billguard.yaml",  # Project root from src/billguard
        ]

        for path in possible_paths:
            if os.path.exists(path):
                config_path = path
                break
        else:
            return {}

    if os.path.exists(config_path):
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
            return config_data
    return {}


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    codec_key: str = Field(
        default="billguard-secure-2024",
        description="Shared key for the reversible storage obfuscation",
    )
    form_max_submissions: int = Field(default=5, description="Form submissions allowed per window")
    form_window_ms: int = Field(default=60000, description="Form submission window in milliseconds")
    form_max_field_length: int = Field(default=1000, description="Maximum length of a submitted text field")
    security_mode_enabled: bool = Field(default=True, description="Security mode at startup")

    @field_validator("codec_key")
    def validate_codec_key(cls, v: str) -> str:
        """An empty key would turn the obfuscation into a no-op."""
        if not v:
            raise ValueError("codec_key must not be empty")
        return v

    @field_validator("form_max_submissions", "form_window_ms", "form_max_field_length")
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be positive")
        return v

    class Config:
        env_prefix = "BILLGUARD_SECURITY_"


class StorageSettings(BaseSettings):
    """Persistence backend configuration."""

    backend: str = Field(default="memory", description="Storage backend: memory or file")
    root_path: Path = Field(default=Path("./.billguard"), description="Root directory for the file backend")

    @field_validator("backend")
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "file"):
            raise ValueError(f"Unsupported storage backend: {v}")
        return v

    class Config:
        env_prefix = "BILLGUARD_STORAGE_"


class Settings(BaseSettings):
    """Main application settings."""

    environment: str = Field(default="development", description="development or production")
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", description="Log renderer: console or json")

    security: SecuritySettings = Field(default_factory=SecuritySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @field_validator("environment")
    def validate_environment(cls, v: str) -> str:
        v = v.lower()
        if v not in ("development", "production"):
            raise ValueError(f"Unknown environment: {v}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    class Config:
        env_prefix = "BILLGUARD_"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance with config file and env support."""

    config_data = load_config_file()

    # Config file provides defaults, env vars override
    if config_data:
        _set_env_from_config(config_data)

    return Settings()


def _set_env_from_config(config_data: Dict[str, Any]) -> None:
    """Set environment variables from config file if not already set."""
    mappings = {
        ("app", "environment"): "BILLGUARD_ENVIRONMENT",
        ("app", "log_level"): "BILLGUARD_LOG_LEVEL",
        ("app", "log_format"): "BILLGUARD_LOG_FORMAT",
        ("security", "codec_key"): "BILLGUARD_SECURITY_CODEC_KEY",
        ("security", "form_max_submissions"): "BILLGUARD_SECURITY_FORM_MAX_SUBMISSIONS",
        ("security", "form_window_ms"): "BILLGUARD_SECURITY_FORM_WINDOW_MS",
        ("security", "form_max_field_length"): "BILLGUARD_SECURITY_FORM_MAX_FIELD_LENGTH",
        ("security", "security_mode_enabled"): "BILLGUARD_SECURITY_SECURITY_MODE_ENABLED",
        ("storage", "backend"): "BILLGUARD_STORAGE_BACKEND",
        ("storage", "root_path"): "BILLGUARD_STORAGE_ROOT_PATH",
    }

    for (section, key), env_var in mappings.items():
        if env_var not in os.environ:
            value = (config_data.get(section) or {}).get(key)
            if value is not None:
                os.environ[env_var] = str(value)


def reload_settings() -> Settings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
