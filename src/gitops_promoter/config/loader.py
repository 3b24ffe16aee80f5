"""Configuration loading with environment variable substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from loguru import logger
from pydantic import ValidationError

from gitops_promoter.errors import ConfigError

from .models import PromoterConfig

CONFIG_PATH = Path("promoter.yaml")
CONFIG_ENV_VAR = "GITOPS_PROMOTER_CONFIG"

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    Raises:
        ConfigError: If a required variable is not set
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ConfigError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ConfigError(f"Required environment variable {var_expr} not set")
        return value

    return _ENV_PATTERN.sub(replacer, text)


def resolve_config_path(file_path: Path | None = None) -> Path:
    """Explicit path, then $GITOPS_PROMOTER_CONFIG, then ./promoter.yaml."""
    if file_path is not None:
        return file_path
    from_env = os.getenv(CONFIG_ENV_VAR)
    return Path(from_env) if from_env else CONFIG_PATH


def load_config(file_path: Path | None = None, *, dotenv_path: Path | None = None) -> PromoterConfig:
    """
    Load the promoter configuration.

    Variables from a ``.env`` file are loaded first (without overriding the
    process environment) so they are available for substitution.

    Args:
        file_path: YAML file to read; see resolve_config_path for the default
        dotenv_path: .env file to load; python-dotenv's search when unset

    Returns:
        PromoterConfig; all defaults when the file does not exist

    Raises:
        ConfigError: If the file cannot be read, parsed, or validated

    YAML Structure Requirements:
        The YAML file must have a top-level 'config:' key containing configuration data.
    """
    load_dotenv(dotenv_path, override=False)

    path = resolve_config_path(file_path)
    if not path.exists():
        if file_path is not None:
            raise ConfigError(f"Configuration file not found: {path}")
        logger.debug(f"No configuration file at {path}; using defaults")
        return PromoterConfig()

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}", details=str(e)) from e

    content = substitute_env_vars(content)

    try:
        loaded: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML in {path}", details=str(e)) from e

    if not isinstance(loaded, dict) or "config" not in loaded:
        raise ConfigError(f"Invalid YAML structure in {path}: missing 'config' key")

    try:
        config = PromoterConfig.model_validate(loaded["config"] or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}", details=str(e)) from e

    logger.info(f"Loaded configuration from {path}")
    return config
