"""Configuration-related exception classes for dtnroute."""


class ConfigError(Exception):
    """Base exception for configuration errors.

    All configuration-related exceptions inherit from this class,
    allowing for broad exception handling when needed.
    """


class ConfigFileNotFoundError(ConfigError):
    """Raised when config file cannot be found.

    This exception is raised when attempting to load a configuration
    file that doesn't exist at the specified path.
    """


class ConfigParseError(ConfigError):
    """Raised when config file cannot be parsed.

    This exception is raised when a configuration file exists but
    contains invalid syntax, has an unsupported extension, or does not
    hold a mapping of sections.
    """


class ConfigTypeConversionError(ConfigError):
    """Raised when a config value cannot be converted to expected type.

    This exception is raised when a configuration value cannot be
    converted to its expected type (e.g., string to int conversion fails).
    """


class InvalidConfigValueError(ConfigError):
    """Raised when a converted config value violates its allowed range.

    For example a negative initial transfer limit or a smoothing factor
    outside ``[0, 1]``.
    """
