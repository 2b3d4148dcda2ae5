"""Configuration constants for dtnroute."""

# Section names
ROUTER_SECTION: str = "router_settings"
CONGESTION_SECTION: str = "congestion_settings"
RL_SECTION: str = "rl_settings"
LOGGING_SECTION: str = "logging_settings"

# Supported file extensions per loader
INI_EXTENSIONS: tuple[str, ...] = (".ini",)
JSON_EXTENSIONS: tuple[str, ...] = (".json",)
YAML_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml")
