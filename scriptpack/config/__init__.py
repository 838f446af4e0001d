"""Configuration module for scriptpack."""

from scriptpack.config.loader import load_config, get_config_path
from scriptpack.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
