"""Option validation for image reducer runs."""

import math
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from ..core.errors import ConfigError


TRUE_VALUES = ('true', 'y', 'yes', 't', '1', '-1')
OUTPUT_FORMATS = ('jpg', 'gif', 'png', 'webp')


@dataclass(frozen=True)
class FieldSpec:
    """Describes one accepted option."""
    kind: str
    required: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    choices: Optional[Sequence[Any]] = None


class ConfigValidator:
    """Validates and coerces raw run options against a schema."""

    SCHEMA: Dict[str, FieldSpec] = {
        'dest_path': FieldSpec('string', required=True),
        'direct_color_bit_depth': FieldSpec('int', choices=(1, 4, 8, 15, 16, 18, 24, 32)),
        'force_direct_color_output_format': FieldSpec('string', choices=OUTPUT_FORMATS),
        'force_indexed_color_output_format': FieldSpec('string', choices=OUTPUT_FORMATS),
        'force_png_to_indexed': FieldSpec('boolean'),
        'force_png_to_jpg': FieldSpec('boolean'),
        'indexed_color_bit_depth': FieldSpec('int', minimum=1, maximum=8),
        'jpeg_blur': FieldSpec('float', minimum=0.1, maximum=100),
        'max_depth': FieldSpec('int', minimum=1),
        'max_height': FieldSpec('int', minimum=1),
        'max_width': FieldSpec('int', minimum=1),
        'min_size_reduction': FieldSpec('int', minimum=0, maximum=100),
        'quality': FieldSpec('int', minimum=0, maximum=100),
        'recursive': FieldSpec('boolean'),
        'source_path': FieldSpec('string', required=True),
        'verbose': FieldSpec('boolean'),
    }

    # Pairs of options that may not both be enabled
    EXCLUSIVE_OPTIONS = [
        ('force_png_to_indexed', 'force_png_to_jpg'),
        ('force_png_to_indexed', 'force_direct_color_output_format'),
    ]

    def validate(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Validate options and return them coerced to their declared types.

        Args:
            options: Raw options; names may use dashes or underscores. Names
                     starting with an underscore are ignored. None values are
                     treated as absent.

        Returns:
            Dictionary of validated options keyed by snake_case name.

        Raises:
            ConfigError: If an option is unknown, missing, malformed or out of range.
        """
        validated = {}

        for raw_name, value in options.items():
            name = self.normalize_name(raw_name)

            if name.startswith('_') or value is None:
                continue

            spec = self.SCHEMA.get(name)
            if spec is None:
                raise ConfigError(f'Unknown option "{raw_name}"')

            validated[name] = self._process_option(name, value, spec)

        self._check_required(validated)
        self._check_exclusive(validated)
        self._check_paths(validated)

        return validated

    @staticmethod
    def normalize_name(name: str) -> str:
        return name.replace('-', '_')

    def _process_option(self, name: str, value: Any, spec: FieldSpec) -> Any:
        converted = self._convert(name, value, spec.kind)

        if spec.minimum is not None and converted < spec.minimum:
            raise ConfigError(f'"{name}" may not be less than {spec.minimum}')

        if spec.maximum is not None and converted > spec.maximum:
            raise ConfigError(f'"{name}" may not exceed {spec.maximum}')

        if spec.choices is not None and converted not in spec.choices:
            allowed = ', '.join(str(choice) for choice in spec.choices)
            raise ConfigError(f'Invalid value for "{name}": {value!r} (expected one of {allowed})')

        return converted

    @staticmethod
    def _convert(name: str, value: Any, kind: str) -> Any:
        """Coerce a raw value to the declared kind."""
        if kind == 'string':
            return str(value)

        if kind == 'boolean':
            if isinstance(value, bool):
                return value
            return str(value).strip().lower() in TRUE_VALUES

        try:
            if kind == 'int':
                if isinstance(value, bool):
                    raise ValueError(value)
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(value)
                return int(value)
            if kind == 'float':
                converted = float(value)
                if not math.isfinite(converted):
                    raise ValueError(value)
                return converted
        except (TypeError, ValueError):
            raise ConfigError(f'"{name}" must be of type {kind}, got {value!r}')

        raise ConfigError(f'"{name}" has an unknown type: {kind}')

    def _check_required(self, options: Dict[str, Any]) -> None:
        missing = [name for name, spec in self.SCHEMA.items() if spec.required and name not in options]
        if missing:
            raise ConfigError(f"Required option missing: {', '.join(missing)}")

    def _check_exclusive(self, options: Dict[str, Any]) -> None:
        for first, second in self.EXCLUSIVE_OPTIONS:
            if options.get(first) and options.get(second):
                raise ConfigError(f'"{first}" and "{second}" options may not be used together')

    def _check_paths(self, options: Dict[str, Any]) -> None:
        source_path = os.path.realpath(options['source_path'])
        dest_path = os.path.realpath(options['dest_path'])

        if not os.path.isdir(source_path):
            raise ConfigError(f"Source path is not a directory: {options['source_path']}")

        if source_path == dest_path:
            raise ConfigError("Source and destination paths must differ")

        if dest_path.startswith(source_path.rstrip(os.sep) + os.sep):
            raise ConfigError("Destination path may not be inside the source path")
