"""
Configuration management for dtnroute.

Main components:
- config.ConfigManager: Loads INI, JSON or YAML files into typed configuration
- schema: Recognized options, converters and defaults per section
- Error classes: Specific configuration exceptions

Import ConfigManager from ``dtnroute.configs.config``; this package only
re-exports the error classes so low-level utilities can depend on them
without pulling in the loader.
"""

from .errors import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigTypeConversionError,
    InvalidConfigValueError,
)

__all__ = [
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "ConfigTypeConversionError",
    "InvalidConfigValueError",
]
