"""
Configuration utility functions for dtnroute.

This module provides utilities for configuration management including:
- String to boolean conversion
- Type conversion with error handling
- Optional-value parsing for INI style files
"""

from collections.abc import Callable
from typing import Any

from dtnroute.configs.errors import ConfigTypeConversionError


def str_to_bool(string: str | bool) -> bool:
    """
    Convert string to boolean value.

    :param string: Input string to convert, booleans are passed through
    :type string: str | bool
    :return: Boolean value
    :rtype: bool
    """
    if isinstance(string, bool):
        return string
    return string.lower() in ["true", "yes", "1"]


def optional_int(value: Any) -> int | None:
    """
    Convert a value to int, mapping ``None`` and ``"none"`` to None.

    :param value: Value read from a configuration file
    :type value: Any
    :return: Integer value or None
    :rtype: int | None
    """
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in ("", "none", "null"):
        return None
    return int(value)


def optional_str(value: Any) -> str | None:
    """
    Convert a value to str, mapping ``None`` and ``"none"`` to None.

    :param value: Value read from a configuration file
    :type value: Any
    :return: String value or None
    :rtype: str | None
    """
    if value is None:
        return None
    text = str(value)
    if text.strip().lower() in ("", "none", "null"):
        return None
    return text


def safe_type_convert(value: Any, type_converter: Callable, option_name: str) -> Any:
    """
    Safely convert value with proper error context.

    :param value: Value to convert
    :type value: Any
    :param type_converter: Function to perform conversion
    :type type_converter: Callable
    :param option_name: Name of option for error reporting
    :type option_name: str
    :return: Converted value
    :rtype: Any
    :raises ConfigTypeConversionError: If conversion fails
    """
    try:
        return type_converter(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise ConfigTypeConversionError(
            f"Failed to convert {option_name}='{value}' "
            f"using {type_converter.__name__}: {e}"
        ) from e
