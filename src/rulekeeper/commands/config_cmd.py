"""Config command - display current configuration."""

from __future__ import annotations

from pathlib import Path

from rulekeeper.commands.base import ConfigResult, Outcome, SettingInfo
from rulekeeper.config import (
    ConfigError,
    find_config_file,
    get_rulekeeper_config,
    get_settings_from_env,
    get_settings_from_yaml,
    load_config,
    validate_config,
)

DISPLAYED_SETTINGS = (
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
    "synthesis_temperature",
    "num_retries",
)


def _get_setting_source(
    key: str,
    yaml_settings: dict,
    env_settings: dict,
) -> str:
    """Determine the source of a setting value."""
    if key in env_settings:
        return "env var"
    if key in yaml_settings:
        return "yaml"
    if "chunking_profile" in env_settings or "chunking_profile" in yaml_settings:
        return "profile"
    return "default"


def config(
    config_path: str | Path | None = None,
) -> ConfigResult:
    """Get current configuration settings.

    Args:
        config_path: Override config file path

    Returns:
        ConfigResult with all settings and their sources
    """
    resolved = get_rulekeeper_config(config_path=config_path)
    if isinstance(resolved, ConfigError):
        error = resolved.message
        if resolved.suggestion:
            error = f"{error} ({resolved.suggestion})"
        return ConfigResult(outcome=Outcome.BAD_INPUT, error=error)

    raw_config = load_config(config_path)
    env_settings = get_settings_from_env()
    yaml_settings = get_settings_from_yaml(raw_config)
    found_config_path = Path(config_path) if config_path else find_config_file()

    result = ConfigResult(
        provider=resolved.provider,
        embedding_model=resolved.embedding_model,
        llm_model=resolved.llm_model,
        api_base=resolved.api_base,
        data_dir=resolved.data_dir,
        use_vector_index=resolved.use_vector_index,
        config_path=str(found_config_path) if found_config_path else None,
        warnings=validate_config(raw_config, found_config_path),
    )

    settings = resolved.settings
    for key in DISPLAYED_SETTINGS:
        value = getattr(settings, key)
        result.settings.append(
            SettingInfo(
                name=key,
                value="default" if value is None else str(value),
                source=_get_setting_source(key, yaml_settings, env_settings),
            )
        )

    return result
