"""Configuration module for delugerpc."""

from delugerpc.config.loader import load_config, get_config_path
from delugerpc.config.schema import ClientSettings

__all__ = ["ClientSettings", "load_config", "get_config_path"]
