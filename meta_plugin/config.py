"""
Configuration management for meta plugins and the plugin host tooling.

Precedence: env vars > .env file > config.yaml > defaults

Config file: $META_HOME/config.yaml (META_HOME defaults to ~/.meta)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Known config keys that can be set via `meta-plugin config set`
CONFIG_KEYS = {
    "log_level", "log_format", "plugin_dirs", "plugin_prefix",
    "search_path", "debug",
}


def _resolve_meta_home() -> Path:
    """Resolve the meta home directory from env or default, before Settings init."""
    raw = os.environ.get("META_HOME", "")
    if raw:
        return Path(raw).expanduser().resolve()
    return Path.home() / ".meta"


def _load_yaml_config(meta_home: Path) -> dict[str, Any]:
    """Load config.yaml from the meta home directory."""
    config_file = get_config_path(meta_home)
    if not config_file.exists():
        return {}
    try:
        with open(config_file) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            logger.warning(f"config.yaml is not a dict, ignoring: {config_file}")
            return {}
        return data
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error loading config.yaml: {e}")
        return {}


def save_yaml_config(meta_home: Path, data: dict[str, Any]) -> Path:
    """Write config values to $META_HOME/config.yaml."""
    config_file = get_config_path(meta_home)
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    return config_file


def get_config_path(meta_home: Path) -> Path:
    """Get the config.yaml path for a meta home directory."""
    return meta_home / "config.yaml"


class Settings(BaseSettings):
    """Plugin configuration. Precedence: env vars > .env > config.yaml > defaults."""

    # Logging. Plugin stderr is shown to the user, so stay quiet by default.
    log_level: str = Field(default="WARNING", description="Log level")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    # Plugin discovery
    plugin_dirs: list[str] = Field(
        default_factory=list,
        description="Extra directories searched for plugin executables",
    )
    plugin_prefix: str = Field(
        default="meta-",
        description="File name prefix identifying plugin executables",
    )
    search_path: bool = Field(
        default=True,
        description="Also search $PATH for plugin executables",
    )

    # Development
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_prefix": "META_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def _inject_yaml_config(cls, data: Any) -> Any:
        """Inject config.yaml values as fallbacks below env vars and .env."""
        if not isinstance(data, dict):
            data = {}

        yaml_config = _load_yaml_config(_resolve_meta_home())

        for key, value in yaml_config.items():
            if key not in data or data[key] is None:
                # Don't override if env var is set
                env_val = os.environ.get(f"META_{key.upper()}")
                if env_val is None:
                    data[key] = value

        return data

    @property
    def meta_home(self) -> Path:
        """Get the meta home directory path."""
        return _resolve_meta_home()

    @property
    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        return "DEBUG" if self.debug else self.log_level


# Global settings instance, created on first use
settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
