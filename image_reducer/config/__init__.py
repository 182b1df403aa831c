"""Configuration management for the image reducer."""

from .config_manager import ConfigManager
from .config_validator import ConfigValidator, FieldSpec

__all__ = ["ConfigManager", "ConfigValidator", "FieldSpec"]
