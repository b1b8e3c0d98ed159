"""
Configuration loader with deep merge.

Precedence order (lowest to highest):
1. Defaults (defined in the Pydantic schemas)
2. YAML file
3. Environment variables
4. CLI arguments

The merge is recursive to preserve every key at every level.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..core.errors import ConfigError
from .schema import AppConfig


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dictionary merge.

    Args:
        base: Base dictionary
        override: Dictionary whose values win over base

    Returns:
        New merged dictionary. Override wins on leaf conflicts.

    Example:
        >>> base = {"a": {"b": 1, "c": 2}, "d": 3}
        >>> override = {"a": {"b": 99}, "e": 4}
        >>> deep_merge(base, override)
        {"a": {"b": 99, "c": 2}, "d": 3, "e": 4}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_config(config_path: Path | None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None to skip

    Returns:
        Configuration dictionary, or an empty dict if there is no file

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if not config_path:
        return {}

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")
    return data


def load_env_overrides() -> dict[str, Any]:
    """Load overrides from environment variables.

    Supported variables:
        TRANSL_DEFAULT_LANGUAGE: overrides translator.default_language
        TRANSL_STRATEGY: overrides translator.strategy
        TRANSL_STRICT: overrides translator.strict
        TRANSL_LOG_LEVEL: overrides logging.level

    Returns:
        Dictionary with the env var overrides
    """
    overrides: dict[str, Any] = {}

    if default_language := os.environ.get("TRANSL_DEFAULT_LANGUAGE"):
        overrides.setdefault("translator", {})["default_language"] = default_language

    if strategy := os.environ.get("TRANSL_STRATEGY"):
        overrides.setdefault("translator", {})["strategy"] = strategy.lower()

    if strict := os.environ.get("TRANSL_STRICT"):
        overrides.setdefault("translator", {})["strict"] = strict

    if log_level := os.environ.get("TRANSL_LOG_LEVEL"):
        overrides.setdefault("logging", {})["level"] = log_level.lower()

    return overrides


def apply_cli_overrides(config_dict: dict[str, Any], cli_args: dict[str, Any]) -> dict[str, Any]:
    """Apply overrides from CLI arguments.

    Args:
        config_dict: Base configuration (already merged with YAML and env)
        cli_args: Dictionary of CLI arguments

    Returns:
        Configuration with CLI overrides applied
    """
    overrides: dict[str, Any] = {}

    if cli_args.get("default_language"):
        overrides.setdefault("translator", {})["default_language"] = cli_args["default_language"]

    if cli_args.get("strategy"):
        overrides.setdefault("translator", {})["strategy"] = cli_args["strategy"]

    if cli_args.get("strict") is not None:
        overrides.setdefault("translator", {})["strict"] = cli_args["strict"]

    if cli_args.get("log_file"):
        overrides.setdefault("logging", {})["file"] = cli_args["log_file"]

    if cli_args.get("verbose") is not None:
        overrides.setdefault("logging", {})["verbose"] = cli_args["verbose"]

    return deep_merge(config_dict, overrides)


def load_config(
    config_path: Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> AppConfig:
    """Load and validate the complete configuration.

    Args:
        config_path: Path to the YAML configuration file
        cli_args: Dictionary of CLI arguments

    Returns:
        Validated AppConfig

    Raises:
        FileNotFoundError: If config_path does not exist
        ConfigError: If the merged configuration is not valid
    """
    cli_args = cli_args or {}

    yaml_config = load_yaml_config(config_path)
    merged = deep_merge(yaml_config, load_env_overrides())
    merged = apply_cli_overrides(merged, cli_args)

    try:
        return AppConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
