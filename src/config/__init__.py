"""Configuration module: exports Settings, DiggingConfig and the YAML loader."""

from src.config.loader import DEFAULT_TAGS, DiggingConfig, load_digging_config
from src.config.settings import Settings

__all__ = ["DEFAULT_TAGS", "DiggingConfig", "Settings", "load_digging_config"]
