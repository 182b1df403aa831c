"""Configuration management for the image reducer."""

import os
import yaml
from typing import Dict, Any, Optional

from .config_validator import ConfigValidator, TRUE_VALUES
from ..core.errors import ConfigError
from ..core.models import ScanConfiguration


class ConfigManager:
    """Merges defaults, an optional YAML file and command-line options into a ScanConfiguration."""

    DEFAULT_CONFIG_LOCATIONS = [
        "image-reducer.yaml",
        "image-reducer.yml",
        os.path.expanduser("~/.image-reducer/config.yaml"),
        os.path.expanduser("~/.image-reducer/config.yml"),
    ]

    DEFAULT_OPTIONS = {
        'recursive': False,
        'min_size_reduction': 0,
        'force_png_to_indexed': False,
        'force_png_to_jpg': False,
        'verbose': False,
    }

    FULL_OPTIMIZATION_PRESET = {
        'max_width': 420,
        'max_height': 600,
        'min_size_reduction': 30,
        'quality': 20,
        'direct_color_bit_depth': 8,
        'indexed_color_bit_depth': 5,
        'force_png_to_indexed': True,
        'jpeg_blur': 2,
        'recursive': True,
    }

    DEFAULT_LOGGING = {
        'level': 'INFO',
        'file': None,
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        the default locations are searched and a missing
                        file is not an error.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.config_file: Optional[str] = None
        self.validator = ConfigValidator()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If an explicitly given config file does not exist.
            ConfigError: If the config file is invalid.
        """
        config_file = self._find_config_file()
        self.config_data = {}

        if config_file:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    self.config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in config file {config_file}: {e}")

            if not isinstance(self.config_data, dict):
                raise ConfigError(f"Config file {config_file} must contain a mapping")

            self.config_file = config_file

        for section in ('options', 'logging'):
            value = self.config_data.get(section)
            if value is None:
                self.config_data[section] = {}
            elif not isinstance(value, dict):
                raise ConfigError(f"Config section '{section}' must be a mapping")

        self._set_defaults()

        return self.config_data

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file, or None if there is none.

        Raises:
            FileNotFoundError: If an explicitly given config file is missing.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        return None

    def _set_defaults(self):
        """Set default values for optional logging parameters."""
        for key, value in self.DEFAULT_LOGGING.items():
            if key not in self.config_data['logging']:
                self.config_data['logging'][key] = value

    def get_options(self) -> Dict[str, Any]:
        """Get raw run options from the config file, keyed by snake_case name."""
        return {
            ConfigValidator.normalize_name(name): value
            for name, value in self.config_data.get('options', {}).items()
        }

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})

    def build_scan_configuration(self, cli_options: Optional[Dict[str, Any]] = None) -> ScanConfiguration:
        """Merge all option sources and validate the result.

        Precedence, lowest first: built-in defaults, config file options,
        command-line options. A ``full_optimization`` option applies its
        preset on top of everything else.

        Args:
            cli_options: Options given on the command line; None values are
                         treated as not given.

        Raises:
            ConfigError: If the merged options are invalid.
        """
        merged: Dict[str, Any] = dict(self.DEFAULT_OPTIONS)
        merged.update(self.get_options())

        for name, value in (cli_options or {}).items():
            if value is not None:
                merged[ConfigValidator.normalize_name(name)] = value

        if self._is_enabled(merged.pop('full_optimization', False)):
            merged.update(self.FULL_OPTIMIZATION_PRESET)

        validated = self.validator.validate(merged)
        return ScanConfiguration(**validated)

    @staticmethod
    def _is_enabled(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in TRUE_VALUES
