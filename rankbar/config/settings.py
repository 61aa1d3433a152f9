"""Configuration utilities for rankbar."""

import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..exceptions import ConfigurationError
from .constants import (
    DEFAULT_API_TIMEOUT_SECONDS,
    ENV_VAR_DEFINITIONS,
    LOG_FILE_NAME,
    RANKBAR_CONFIG_DIR,
)


def validate_env_var(name: str, value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a single environment variable value.

    Args:
        name: The environment variable name.
        value: The current value (or None if not set).

    Returns:
        Tuple of (is_valid, error_message).
    """
    if name not in ENV_VAR_DEFINITIONS:
        return True, None

    if value is None:
        return True, None

    if name == "RANKBAR_API_TIMEOUT":
        try:
            if float(value) <= 0:
                raise ValueError(value)
        except ValueError:
            return False, f"Invalid value '{value}' for {name}. Expected a positive number"
        return True, None

    valid_values = ENV_VAR_DEFINITIONS[name].get("valid_values")
    if valid_values is None:
        return True, None

    if value.lower() not in [v.lower() for v in valid_values]:
        return False, f"Invalid value '{value}' for {name}. Valid values: {valid_values}"

    return True, None


def validate_all_env_vars() -> List[str]:
    """Validate all rankbar environment variables.

    Returns:
        List of error messages (empty if all valid).
    """
    errors = []
    for name in ENV_VAR_DEFINITIONS:
        is_valid, error = validate_env_var(name, os.environ.get(name))
        if not is_valid:
            errors.append(error)
    return errors


def get_env_var(name: str, validate: bool = True) -> Optional[str]:
    """Get an environment variable with optional validation.

    Returns:
        The environment variable value, its default, or None.

    Raises:
        ConfigurationError: If validate=True and the value is invalid.
    """
    value = os.environ.get(name)

    if validate and value is not None:
        is_valid, error = validate_env_var(name, value)
        if not is_valid:
            raise ConfigurationError(error, setting=name)

    if value is None and name in ENV_VAR_DEFINITIONS:
        return ENV_VAR_DEFINITIONS[name].get("default")

    return value


def get_env_info() -> Dict[str, Dict]:
    """Describe every rankbar environment variable, masking sensitive values."""
    info = {}
    for name, definition in ENV_VAR_DEFINITIONS.items():
        value = os.environ.get(name)
        is_valid, _ = validate_env_var(name, value)

        display_value = value
        if value and definition.get("sensitive"):
            display_value = value[:4] + "..." if len(value) > 4 else "***"

        info[name] = {
            "description": definition.get("description", ""),
            "value": display_value,
            "is_set": value is not None,
            "valid": is_valid,
            "default": definition.get("default"),
            "sensitive": definition.get("sensitive", False),
        }
    return info


def get_api_url() -> str:
    """Base URL of the analysis API, without a trailing slash."""
    return get_env_var("RANKBAR_API_URL").rstrip("/")


def get_api_token() -> Optional[str]:
    return get_env_var("RANKBAR_API_TOKEN")


def get_api_timeout() -> float:
    value = get_env_var("RANKBAR_API_TIMEOUT")
    return float(value) if value else DEFAULT_API_TIMEOUT_SECONDS


def get_log_level() -> str:
    return get_env_var("RANKBAR_LOG_LEVEL").upper()


def get_log_path() -> Path:
    """Get the log file path, creating the config directory if needed."""
    RANKBAR_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return RANKBAR_CONFIG_DIR / LOG_FILE_NAME
