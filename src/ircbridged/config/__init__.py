"""Configuration: defaults, YAML file, env overlay, CLI flags."""

from ircbridged.config.loader import load_config, load_config_with_env
from ircbridged.config.schema import Config, parse_duration, parse_server_address

__all__ = [
    "Config",
    "load_config",
    "load_config_with_env",
    "parse_duration",
    "parse_server_address",
]
