"""Optimization decisions for a single image."""

import math
import os
from typing import Optional, Tuple

from .models import (
    ColorDepthDirective,
    CompressionDirective,
    ImageProbe,
    ScanConfiguration,
    TransformPlan,
    TreeEntry,
)


LOSSY_EXTENSIONS = ('.jpg', '.jpeg')
LOSSLESS_EXTENSIONS = ('.gif', '.png')
JPEG_SAMPLING_FACTOR = (4, 2)
LOSSLESS_QUALITY = 100


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up."""
    return int(math.floor(value + 0.5))


class OptimizationPlanner:
    """Turns image metadata and run options into a TransformPlan.

    The planner performs no I/O; the plan it returns is executed by a
    VerificationController.
    """

    def plan(self, probe: ImageProbe, entry: TreeEntry, config: ScanConfiguration) -> TransformPlan:
        width, height = self.target_size(probe, config)
        target_extension = self.target_extension(probe, entry, config)
        direct_color, indexed_color = self.color_depth(probe, entry, config)

        return TransformPlan(
            width=width,
            height=height,
            target_extension=target_extension,
            destination=os.path.join(config.dest_path, entry.relative_dir, entry.basename + target_extension),
            compression=self.compression(target_extension, config),
            direct_color=direct_color,
            indexed_color=indexed_color
        )

    def target_size(self, probe: ImageProbe, config: ScanConfiguration) -> Tuple[int, int]:
        """Compute target dimensions.

        The width limit is applied first and the height limit second, so a
        height limit can shrink a width-limited image further but not the
        other way round. If the result does not shrink the image by at least
        ``min_size_reduction`` percent, both dimensions are scaled by that
        percentage from the natural size instead.
        """
        width = float(probe.width)
        height = float(probe.height)

        if config.max_width and width > config.max_width:
            scale = config.max_width / width
            width = float(config.max_width)
            height *= scale

        if config.max_height and height > config.max_height:
            scale = config.max_height / height
            height = float(config.max_height)
            width *= scale

        effective_scale = (width / probe.width) * 100 if probe.width else 100.0

        if 100 - effective_scale < config.min_size_reduction:
            factor = (100 - config.min_size_reduction) / 100
            width = probe.width * factor
            height = probe.height * factor

        return round_half_up(width), round_half_up(height)

    def color_depth(self, probe: ImageProbe, entry: TreeEntry,
                    config: ScanConfiguration) -> Tuple[Optional[ColorDepthDirective], Optional[ColorDepthDirective]]:
        """Return the (direct color, indexed color) bit depth directives."""
        png_to_indexed = entry.extension_lower == '.png' and config.force_png_to_indexed
        direct_color = None
        indexed_color = None

        if probe.is_direct_color and config.direct_color_bit_depth and not png_to_indexed:
            bits = config.direct_color_bit_depth
            direct_color = ColorDepthDirective(bit_depth=bits, palette_size=bits ** 3)

        if (not probe.is_direct_color or png_to_indexed) and config.indexed_color_bit_depth:
            bits = config.indexed_color_bit_depth
            indexed_color = ColorDepthDirective(bit_depth=bits, palette_size=2 ** bits)

        return direct_color, indexed_color

    def target_extension(self, probe: ImageProbe, entry: TreeEntry, config: ScanConfiguration) -> str:
        if probe.is_direct_color and config.force_direct_color_output_format:
            return '.' + config.force_direct_color_output_format
        if not probe.is_direct_color and config.force_indexed_color_output_format:
            return '.' + config.force_indexed_color_output_format

        if probe.is_direct_color and entry.extension_lower == '.png' and config.force_png_to_jpg:
            return '.jpg'

        return entry.extension

    def compression(self, target_extension: str, config: ScanConfiguration) -> CompressionDirective:
        extension = target_extension.lower()

        if extension in LOSSY_EXTENSIONS:
            return CompressionDirective(
                quality=config.quality or None,
                blur=config.jpeg_blur or None,
                sampling_factor=JPEG_SAMPLING_FACTOR
            )

        if extension in LOSSLESS_EXTENSIONS:
            return CompressionDirective(quality=LOSSLESS_QUALITY)

        return CompressionDirective(quality=config.quality or None)
