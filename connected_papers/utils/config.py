"""
Configuration management for connected-papers.
Loads and validates settings from YAML files and environment variables.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

CONFIG_DIR_ENV = "CPAPERS_CONFIG_DIR"
ENV_PREFIX = "CPAPERS_"


class GeneralConfig(BaseModel):
    """General configuration."""

    project_name: str = "connected-papers"
    version: str = "0.1.0"
    log_level: str = "INFO"
    log_file: str | None = None  # stderr only when unset
    json_logs: bool = True


class Settings(BaseModel):
    """Main settings container."""

    general: GeneralConfig = Field(default_factory=GeneralConfig)


class ApiEndpointConfig(BaseModel):
    """Configuration for a single remote API."""

    enabled: bool = True
    base_url: str
    timeout_seconds: float = 30.0
    headers: dict[str, str] | None = None
    api_key_header: str = "X-Api-Key"
    api_key_env: str | None = None


# Built-in endpoints (used when an API is not configured)
_DEFAULT_APIS: dict[str, dict[str, Any]] = {
    "connected_papers": {
        "base_url": "https://rest.prod.connectedpapers.com/papers-api",
        "timeout_seconds": 90.0,
        "api_key_header": "X-Api-Key",
        "api_key_env": "CONNECTED_PAPERS_API_KEY",
    },
    "semantic_scholar": {
        "base_url": "https://api.semanticscholar.org/graph/v1",
        "timeout_seconds": 30.0,
        "api_key_header": "x-api-key",
        "api_key_env": "SEMANTIC_SCHOLAR_API_KEY",
    },
}


class ApisConfig(BaseModel):
    """Remote APIs configuration."""

    apis: dict[str, ApiEndpointConfig] = Field(default_factory=dict)

    def get_api_config(self, api_name: str) -> ApiEndpointConfig:
        """Get API configuration with fallback to built-in defaults.

        Args:
            api_name: Name of the API (connected_papers, semantic_scholar)

        Returns:
            ApiEndpointConfig for the requested API

        Raises:
            KeyError: If the API is neither configured nor built in.
        """
        if api_name in self.apis:
            return self.apis[api_name]
        return ApiEndpointConfig(**_DEFAULT_APIS[api_name])


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary.
        override: Override dictionary.

    Returns:
        Merged dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_local_overrides(config_dir: Path) -> dict[str, Any]:
    """Load local.yaml overrides.

    Top-level keys correspond to config file names (without .yaml extension).

    Example local.yaml:
        settings:
          general:
            log_level: DEBUG
        apis:
          apis:
            connected_papers:
              timeout_seconds: 120
    """
    local_path = config_dir / "local.yaml"
    if not local_path.exists():
        return {}
    with open(local_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_yaml_with_local_override(
    config_dir: Path,
    filename: str,
    section_key: str | None = None,
) -> dict[str, Any]:
    """Load YAML file with local.yaml override support.

    Args:
        config_dir: Configuration directory path.
        filename: YAML filename (e.g., "settings.yaml").
        section_key: Key in local.yaml for overrides.
                     Defaults to filename without extension.

    Returns:
        Merged configuration dictionary.
    """
    config: dict[str, Any] = {}

    base_path = config_dir / filename
    if base_path.exists():
        with open(base_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

    local_overrides = _load_local_overrides(config_dir)
    if section_key is None:
        section_key = Path(filename).stem

    if isinstance(local_overrides.get(section_key), dict):
        config = _deep_merge(config, local_overrides[section_key])

    return config


def _apply_env_overrides(config: dict[str, Any], section: str | None = None) -> dict[str, Any]:
    """Apply environment variable overrides.

    Environment variables are prefixed with CPAPERS_ and use double
    underscores for nested keys. With a section, only variables whose
    first key is that section apply, e.g. CPAPERS_APIS__CONNECTED_PAPERS__TIMEOUT_SECONDS.

    Example:
        CPAPERS_GENERAL__LOG_LEVEL=DEBUG

    Args:
        config: Configuration dictionary.
        section: Optional leading key to restrict to.

    Returns:
        Configuration with environment overrides.
    """
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX) or key == CONFIG_DIR_ENV:
            continue

        key_path = key[len(ENV_PREFIX) :].lower().split("__")
        if section is not None:
            if len(key_path) < 2 or key_path[0] != section:
                continue

        current = config
        for part in key_path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        final_key = key_path[-1]
        try:
            if value.lower() in ("true", "false"):
                current[final_key] = value.lower() == "true"
            elif "." in value:
                current[final_key] = float(value)
            else:
                current[final_key] = int(value)
        except ValueError:
            current[final_key] = value

    return config


def get_config_dir() -> Path:
    """Get the configuration directory."""
    return Path(os.environ.get(CONFIG_DIR_ENV, "config"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings.

    Settings are loaded from:
    1. Default values
    2. config/settings.yaml (+ local.yaml "settings" section)
    3. Environment variables (highest priority)

    Returns:
        Settings instance.
    """
    config = _load_yaml_with_local_override(get_config_dir(), "settings.yaml", "settings")
    config = _apply_env_overrides(config)
    return Settings(**config)


@lru_cache(maxsize=1)
def get_apis_config() -> ApisConfig:
    """Get remote APIs configuration.

    Configuration is loaded from:
    1. config/apis.yaml (+ local.yaml "apis" section)
    2. Environment variables (highest priority, CPAPERS_APIS__<NAME>__<KEY>)

    Configured entries are merged over the built-in defaults, so a file
    only needs to name the keys it changes.

    Returns:
        ApisConfig instance.
    """
    config_data = _load_yaml_with_local_override(get_config_dir(), "apis.yaml", "apis")
    config_data = _apply_env_overrides(config_data, section="apis")

    apis_dict: dict[str, ApiEndpointConfig] = {}
    for api_name, api_data in (config_data.get("apis") or {}).items():
        defaults = _DEFAULT_APIS.get(api_name, {})
        apis_dict[api_name] = ApiEndpointConfig(**_deep_merge(defaults, api_data or {}))

    return ApisConfig(apis=apis_dict)


def get_project_root() -> Path:
    """Get the project root directory.

    Returns:
        Project root path.
    """
    return Path(__file__).parent.parent.parent
