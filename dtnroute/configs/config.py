"""Centralized configuration management for dtnroute."""

import configparser
import json
import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from dtnroute.configs.constants import (
    CONGESTION_SECTION,
    INI_EXTENSIONS,
    JSON_EXTENSIONS,
    LOGGING_SECTION,
    RL_SECTION,
    ROUTER_SECTION,
    YAML_EXTENSIONS,
)
from dtnroute.configs.errors import (
    ConfigFileNotFoundError,
    ConfigParseError,
    InvalidConfigValueError,
)
from dtnroute.configs.schema import DEFAULTS_DICT, OPTIONS_DICT, get_converter
from dtnroute.domain.config import CongestionConfig, LearningConfig, RouterConfig
from dtnroute.utils.config import safe_type_convert
from dtnroute.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DTNConfig:
    """Typed configuration for one router and its learning engine."""

    router: RouterConfig = field(default_factory=RouterConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)
    logging: dict[str, Any] = field(
        default_factory=lambda: dict(DEFAULTS_DICT[LOGGING_SECTION])
    )


class ConfigManager:
    """Configuration manager with per-option type conversion and validation."""

    def __init__(self, config_path: str | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file, loaded immediately if it exists
        """
        self.config_path = config_path
        self._config: DTNConfig | None = None
        self._raw_config: dict[str, dict[str, Any]] = {}

        if config_path and os.path.exists(config_path):
            self.load_config(config_path)

    def load_config(self, path: str) -> DTNConfig:
        """Load and validate configuration from file.

        Args:
            path: Path to configuration file

        Returns:
            Validated configuration object

        Raises:
            ConfigFileNotFoundError: If configuration file doesn't exist
            ConfigParseError: If the file cannot be parsed or has an unknown extension
            ConfigTypeConversionError: If a value cannot be converted
            InvalidConfigValueError: If a converted value is out of range
        """
        if not os.path.exists(path):
            raise ConfigFileNotFoundError(f"Configuration file not found: {path}")

        if path.endswith(INI_EXTENSIONS):
            raw_config = self._load_ini(path)
        elif path.endswith(JSON_EXTENSIONS):
            raw_config = self._load_json(path)
        elif path.endswith(YAML_EXTENSIONS):
            raw_config = self._load_yaml(path)
        else:
            raise ConfigParseError(f"Unsupported configuration file format: {path}")

        self.config_path = path
        return self.load_dict(raw_config)

    def load_dict(self, raw_config: dict[str, Any]) -> DTNConfig:
        """Build the configuration from an already parsed mapping of sections.

        Args:
            raw_config: Section name to option mapping

        Returns:
            Validated configuration object
        """
        if not isinstance(raw_config, dict):
            raise ConfigParseError("Configuration root must be a mapping of sections")

        self._raw_config = {}
        for section_name, section in raw_config.items():
            if not isinstance(section, dict):
                raise ConfigParseError(
                    f"Section '{section_name}' must be a mapping of options"
                )
            self._raw_config[section_name] = dict(section)

        self._config = self._create_config_object(self._raw_config)
        return self._config

    def _load_ini(self, path: str) -> dict[str, dict[str, Any]]:
        """Load INI configuration file."""
        config = configparser.ConfigParser()
        try:
            config.read(path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigParseError(f"Could not parse {path}: {e}") from e

        return {
            section_name: dict(config[section_name].items())
            for section_name in config.sections()
        }

    def _load_json(self, path: str) -> dict[str, Any]:
        """Load JSON configuration file."""
        with open(path, encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigParseError(f"Could not parse {path}: {e}") from e

    def _load_yaml(self, path: str) -> dict[str, Any]:
        """Load YAML configuration file."""
        with open(path, encoding="utf-8") as f:
            try:
                return yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigParseError(f"Could not parse {path}: {e}") from e

    def _convert_section(self, section_name: str) -> dict[str, Any]:
        """Apply defaults and converters to one section of the raw config."""
        converted = dict(DEFAULTS_DICT.get(section_name, {}))
        for option, value in self._raw_config.get(section_name, {}).items():
            converter = get_converter(section_name, option)
            if converter is None:
                logger.warning(
                    "Ignoring unknown option '%s' in section '%s'", option, section_name
                )
                continue
            converted[option] = safe_type_convert(value, converter, option)
        return converted

    def _create_config_object(self, raw_config: dict[str, Any]) -> DTNConfig:
        """Create structured configuration object from raw config."""
        for section_name in raw_config:
            if section_name not in OPTIONS_DICT:
                logger.warning("Ignoring unknown section '%s'", section_name)

        router_options = self._convert_section(ROUTER_SECTION)
        congestion_options = self._convert_section(CONGESTION_SECTION)
        rl_options = self._convert_section(RL_SECTION)
        logging_options = self._convert_section(LOGGING_SECTION)

        try:
            congestion = CongestionConfig.from_dict(congestion_options)
            router = RouterConfig.from_dict({**router_options, "congestion": congestion})
            learning = LearningConfig.from_dict(rl_options)
        except ValueError as e:
            raise InvalidConfigValueError(str(e)) from e

        return DTNConfig(router=router, learning=learning, logging=logging_options)

    def get_config(self) -> DTNConfig | None:
        """Get the loaded configuration object."""
        return self._config

    def get_module_config(self, module_name: str) -> dict[str, Any]:
        """Get configuration for a specific module as a plain dictionary.

        Args:
            module_name: One of 'router', 'congestion', 'rl', 'logging'

        Returns:
            Module-specific configuration dictionary, empty if nothing is loaded
        """
        if not self._config:
            return {}

        router_dict = self._config.router.to_dict()
        module_map = {
            "router": router_dict,
            "congestion": router_dict["congestion"],
            "rl": self._config.learning.to_dict(),
            "logging": dict(self._config.logging),
        }
        return module_map.get(module_name, {})

    def update_config(self, section: str, key: str, value: Any) -> None:
        """Update a specific configuration value and rebuild the typed config.

        Args:
            section: Configuration section name
            key: Configuration key
            value: New value
        """
        if section not in self._raw_config:
            self._raw_config[section] = {}

        self._raw_config[section][key] = value
        self._config = self._create_config_object(self._raw_config)

    def save_config(self, path: str, format_type: str = "ini") -> None:
        """Save current raw configuration to file.

        Args:
            path: Output file path
            format_type: Output format ('ini', 'json', 'yaml')
        """
        if not self._raw_config:
            raise ValueError("No configuration loaded to save")

        if format_type == "ini":
            self._save_ini(path)
        elif format_type == "json":
            self._save_json(path)
        elif format_type == "yaml":
            self._save_yaml(path)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def _save_ini(self, path: str) -> None:
        """Save configuration as INI file."""
        config = configparser.ConfigParser()

        for section_name, section_data in self._raw_config.items():
            config[section_name] = {}
            for key, value in section_data.items():
                if isinstance(value, (dict, list)):
                    config[section_name][key] = json.dumps(value)
                else:
                    config[section_name][key] = str(value)

        with open(path, "w", encoding="utf-8") as f:
            config.write(f)

    def _save_json(self, path: str) -> None:
        """Save configuration as JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._raw_config, f, indent=2)

    def _save_yaml(self, path: str) -> None:
        """Save configuration as YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self._raw_config, f, default_flow_style=False)
