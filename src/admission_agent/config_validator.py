"""
Configuration validation utilities.

Environment values are read here so that config_loader only maps names to
fields.
"""
import os
import warnings
from typing import Optional, Tuple

from .exceptions import ConfigurationError


def get_optional_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get optional environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Environment variable value or default
    """
    value = os.getenv(key, default)

    if value and _is_placeholder(value):
        # Warn but don't fail for optional configs
        warnings.warn(
            f"{key} appears to be a placeholder. Using default or None.",
            UserWarning
        )
        return default

    return value


def get_float_env(key: str, default: float) -> float:
    """
    Get a float environment variable.

    :raises: ConfigurationError if the value is not a number
    """
    value = get_optional_env(key)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value.replace(",", "."))
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {value!r}") from None


def get_int_env(key: str, default: int) -> int:
    value = get_optional_env(key)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {value!r}") from None


def get_bool_env(key: str, default: bool) -> bool:
    value = get_optional_env(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_float_list_env(key: str, default: Tuple[float, ...]) -> Tuple[float, ...]:
    """Parse a comma or semicolon separated list such as '0.03;0.05'."""
    value = get_optional_env(key)
    if not value:
        return default
    parts = [p.strip() for p in value.replace(";", ",").split(",") if p.strip()]
    try:
        return tuple(float(p) for p in parts)
    except ValueError:
        raise ConfigurationError(f"{key} must be a list of numbers, got {value!r}") from None


def _is_placeholder(value: str) -> bool:
    """Check if value is a placeholder."""
    if not value:
        return False

    placeholder_patterns = [
        "your_",
        "placeholder",
        "example",
        "xxx",
        "replace",
        "TODO",
    ]

    value_lower = value.lower()
    return any(pattern.lower() in value_lower for pattern in placeholder_patterns)


def validate_path(path: str, path_name: str, must_exist: bool = False) -> str:
    """
    Validate file/directory path.

    :param path: Path to validate
    :param path_name: Name of the path (for error messages)
    :param must_exist: Whether path must exist
    :return: Validated path
    :raises: ConfigurationError if invalid
    """
    if not path:
        raise ConfigurationError(f"{path_name} is required.")

    if must_exist and not os.path.exists(path):
        raise ConfigurationError(
            f"{path_name} does not exist: {path}\n"
            f"Please check the path and ensure the file/directory exists."
        )

    return path
