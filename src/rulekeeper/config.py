"""Configuration loading utilities for Rulekeeper.

Used by the CLI commands and by applications that want file/env based
configuration. It handles:
- Finding and loading rulekeeper.yaml config files
- Loading .env files for API keys
- Building Settings objects from multiple sources
- Creating Rulekeeper instances from configuration
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml  # type: ignore[import-untyped]

from rulekeeper.providers.litellm.models import (
    LOCAL_API_BASE,
    LOCAL_API_KEY,
    ChatModels,
    EmbeddingModels,
)

if TYPE_CHECKING:
    from rulekeeper.rulekeeper import Rulekeeper
    from rulekeeper.settings import Settings

# Default paths
DEFAULT_DATA_DIR = "./rulekeeper_data"
CONFIG_FILES = ["rulekeeper.yaml", "rulekeeper.yml", ".rulekeeperrc"]
ENV_FILE = ".env"
ENV_PREFIX = "RULEKEEPER_"


@dataclass
class ConfigError:
    """Error during configuration loading."""

    message: str
    suggestion: str | None = None


def load_env_file(env_path: str | Path = ENV_FILE) -> None:
    """Load environment variables from .env file if it exists.

    Existing environment variables are never overridden.

    Args:
        env_path: Path to .env file (default: .env in current directory)
    """
    path = Path(env_path)
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("'\"")
                if key not in os.environ:
                    os.environ[key] = value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file in current directory or parent directories.

    Args:
        start_dir: Directory to start searching from (default: cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir or Path.cwd()
    for _ in range(10):  # Limit search depth
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


VALID_ROOT_KEYS = {
    "provider",
    "embedding_model",
    "llm_model",
    "api_base",
    "api_key",
    "data_dir",
    "use_vector_index",
    "settings",
}

VALID_SETTINGS_KEYS = {
    "min_chunk_size",
    "target_chunk_size",
    "max_chunk_size",
    "overlap_size",
    "min_sentence_length",
    "use_pysbd_splitter",
    "default_limit",
    "similarity_threshold",
    "chat_similarity_threshold",
    "enhance_queries",
    "synthesis_prompt",
    "synthesis_temperature",
    "num_retries",
    "chunking_profile",
}


def validate_config(config: dict[str, Any], config_path: Path | None = None) -> list[str]:
    """Validate config and return warnings about unknown keys.

    Args:
        config: The loaded configuration dictionary
        config_path: Path to config file (for error messages)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    unknown_root = set(config.keys()) - VALID_ROOT_KEYS
    if unknown_root:
        path_str = str(config_path) if config_path else "config"
        warnings.append(f"Unknown config keys in {path_str}: {', '.join(sorted(unknown_root))}")

    settings = config.get("settings", {})
    if isinstance(settings, dict):
        unknown_settings = set(settings.keys()) - VALID_SETTINGS_KEYS
        if unknown_settings:
            warnings.append(f"Unknown settings keys: {', '.join(sorted(unknown_settings))}")

    return warnings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Explicit path to config file, or None to search

    Returns:
        Configuration dictionary (empty if no config found)
    """
    config_path = Path(config_path) if config_path is not None else find_config_file()

    if config_path is None:
        return {}

    with open(config_path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return config


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _parse_optional_str(value: str) -> str | None:
    return value or None


def _parse_optional_float(value: str) -> float | None:
    return float(value) if value != "" else None


# Settings field -> parser for the matching RULEKEEPER_* variable
ENV_SETTINGS: dict[str, Callable[[str], Any]] = {
    "min_chunk_size": int,
    "target_chunk_size": int,
    "max_chunk_size": int,
    "overlap_size": int,
    "min_sentence_length": int,
    "use_pysbd_splitter": _parse_bool,
    "default_limit": int,
    "similarity_threshold": float,
    "chat_similarity_threshold": float,
    "enhance_queries": _parse_bool,
    "synthesis_prompt": _parse_optional_str,
    "synthesis_temperature": _parse_optional_float,
    "num_retries": int,
    "chunking_profile": str,
}


def get_settings_from_env() -> dict[str, Any]:
    """Read behavioral settings from RULEKEEPER_* environment variables.

    Only variables that are set (and parse) are returned, so YAML settings
    stay in effect unless explicitly overridden.

    Returns:
        Dictionary of setting name -> value for explicitly set env vars
    """
    result: dict[str, Any] = {}
    for key, parse in ENV_SETTINGS.items():
        raw = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
        if raw is None:
            continue
        try:
            result[key] = parse(raw)
        except ValueError:
            continue
    return result


def get_settings_from_yaml(config: dict[str, Any]) -> dict[str, Any]:
    """Extract settings from the 'settings:' section of a YAML config.

    Args:
        config: The loaded YAML configuration

    Returns:
        Dictionary of setting name -> value
    """
    yaml_settings = config.get("settings", {}) or {}
    return {key: value for key, value in yaml_settings.items() if key in VALID_SETTINGS_KEYS}


def build_settings(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> Settings:
    """Build Settings object from YAML config and env vars.

    Precedence (highest to lowest):
    1. Environment variables (for CI/CD override)
    2. YAML settings: section
    3. Settings class defaults

    Args:
        config: YAML configuration dictionary
        env_settings: Environment variable overrides (if None, reads from env)

    Returns:
        Configured Settings instance
    """
    from rulekeeper.settings import Settings

    config = config or {}
    yaml_settings = get_settings_from_yaml(config)
    env_settings = env_settings if env_settings is not None else get_settings_from_env()

    merged = {**yaml_settings, **env_settings}

    # A chunking profile supplies defaults for several chunk sizes at once
    chunking_profile = merged.pop("chunking_profile", None)
    if chunking_profile:
        return Settings.with_profile(chunking_profile, **merged)
    return Settings(**merged)


def _root_value(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Resolve a root-level value: RULEKEEPER_<KEY> env var, then YAML, then default."""
    env_value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
    if env_value is not None:
        return env_value
    if key in config:
        return config[key]
    return default


@dataclass
class RulekeeperConfig:
    """Configuration for creating a Rulekeeper instance."""

    provider: str
    embedding_model: str
    llm_model: str
    api_base: str | None
    api_key: str | None
    data_dir: str
    use_vector_index: bool
    settings: Settings


def get_rulekeeper_config(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> RulekeeperConfig | ConfigError:
    """Get configuration for creating a Rulekeeper instance.

    This extracts configuration without creating the instance, allowing
    the caller to handle errors and missing values appropriately.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        RulekeeperConfig with all settings, or ConfigError if invalid
    """
    try:
        config = load_config(config_path)
    except (OSError, yaml.YAMLError) as e:
        return ConfigError(
            message=f"Could not read configuration: {e}",
            suggestion="Check the YAML syntax of rulekeeper.yaml",
        )

    provider = str(_root_value(config, "provider", "litellm"))
    if provider != "litellm":
        return ConfigError(
            message=f"Unknown provider '{provider}'",
            suggestion="Supported providers: litellm",
        )

    try:
        settings = build_settings(config)
    except ValueError as e:
        return ConfigError(
            message=f"Invalid settings: {e}",
            suggestion="Check the settings section of rulekeeper.yaml and RULEKEEPER_* variables",
        )

    use_vector_index = _root_value(config, "use_vector_index", False)
    if isinstance(use_vector_index, str):
        use_vector_index = _parse_bool(use_vector_index)

    return RulekeeperConfig(
        provider=provider,
        embedding_model=str(
            _root_value(config, "embedding_model", EmbeddingModels.NOMIC_EMBED_TEXT)
        ),
        llm_model=str(_root_value(config, "llm_model", ChatModels.MISTRAL_SMALL_32)),
        api_base=_root_value(config, "api_base", LOCAL_API_BASE) or None,
        api_key=_root_value(config, "api_key", LOCAL_API_KEY) or None,
        data_dir=str(data_dir or _root_value(config, "data_dir", DEFAULT_DATA_DIR)),
        use_vector_index=bool(use_vector_index),
        settings=settings,
    )


def create_rulekeeper(config: RulekeeperConfig) -> Rulekeeper:
    """Create a Rulekeeper instance from configuration.

    Args:
        config: Configuration for the Rulekeeper instance

    Returns:
        Configured Rulekeeper instance
    """
    from rulekeeper.configuration import LiteLLMProvider, LocalStorage
    from rulekeeper.rulekeeper import Rulekeeper

    return Rulekeeper(
        provider=LiteLLMProvider(
            embedding=config.embedding_model,
            llm=config.llm_model,
            api_base=config.api_base,
            api_key=config.api_key,
        ),
        storage=LocalStorage(config.data_dir, use_vector_index=config.use_vector_index),
        settings=config.settings,
    )


def get_rulekeeper(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> Rulekeeper | ConfigError:
    """Create a Rulekeeper instance based on configuration.

    Convenience function combining get_rulekeeper_config and create_rulekeeper.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        Configured Rulekeeper instance, or ConfigError if configuration is invalid
    """
    config = get_rulekeeper_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return config
    return create_rulekeeper(config)
