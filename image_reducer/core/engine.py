"""Transform engine adapters used to probe and write images."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from PIL import Image, ImageFilter, ImageOps, ImageSequence

from .errors import TransformError
from .models import ImageProbe, TransformPlan


class TransformEngine(ABC):
    """Interface between the optimization pipeline and an image library."""

    @abstractmethod
    def probe(self, path: str) -> ImageProbe:
        """Read size and color model of the image at ``path``.

        Raises:
            TransformError: If the image cannot be inspected.
        """

    @abstractmethod
    def write(self, source_path: str, plan: TransformPlan) -> None:
        """Transform ``source_path`` according to ``plan`` and write ``plan.destination``.

        Raises:
            TransformError: If the image cannot be transformed or written.
        """


class PillowTransformEngine(TransformEngine):
    """Transform engine backed by Pillow."""

    INDEXED_MODES = ('P', 'PA', '1')
    ALPHA_MODES = ('RGBA', 'LA', 'PA')

    FORMATS = {
        '.jpg': 'JPEG',
        '.jpeg': 'JPEG',
        '.png': 'PNG',
        '.gif': 'GIF',
        '.webp': 'WEBP',
    }

    # Pillow's JPEG subsampling values by horizontal/vertical factor
    SUBSAMPLING = {
        (1, 1): 0,
        (2, 1): 1,
        (4, 2): 2,
    }

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def probe(self, path: str) -> ImageProbe:
        try:
            with Image.open(path) as img:
                width, height = img.size
                mode = img.mode
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise TransformError(path, f"cannot identify image: {e}") from e

        return ImageProbe(width=width, height=height, is_direct_color=mode not in self.INDEXED_MODES)

    def write(self, source_path: str, plan: TransformPlan) -> None:
        image_format = self.FORMATS.get(plan.target_extension.lower())
        if image_format is None:
            raise TransformError(source_path, f"unsupported target format {plan.target_extension}")

        try:
            with Image.open(source_path) as source:
                img = self._prepare(source, plan, image_format)
                img.save(plan.destination, format=image_format, **self._save_options(plan, image_format))
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            raise TransformError(source_path, f"cannot write {plan.destination}: {e}") from e

        self.logger.debug(f"Wrote {plan.destination} ({plan.width}x{plan.height}, {image_format})")

    def _prepare(self, source: Image.Image, plan: TransformPlan, image_format: str) -> Image.Image:
        """Apply flatten, resize, color depth and blur steps."""
        if plan.flatten:
            img = next(ImageSequence.Iterator(source)).copy()
        else:
            img = source.copy()

        has_alpha = img.mode in self.ALPHA_MODES or 'transparency' in img.info

        if image_format == 'JPEG':
            img = self._flatten_alpha(img) if has_alpha else img.convert('RGB')
        else:
            img = img.convert('RGBA' if has_alpha else 'RGB')

        if plan.strip_metadata:
            img.info = {}

        if (plan.width, plan.height) != img.size:
            img = img.resize((max(plan.width, 1), max(plan.height, 1)), Image.Resampling.LANCZOS)

        if plan.compression.blur:
            img = img.filter(ImageFilter.GaussianBlur(radius=plan.compression.blur))

        if plan.direct_color and plan.direct_color.bit_depth < 8 and img.mode == 'RGB':
            img = ImageOps.posterize(img, plan.direct_color.bit_depth)

        if plan.indexed_color and image_format in ('PNG', 'GIF'):
            colors = min(plan.indexed_color.palette_size, 256)
            method = Image.Quantize.FASTOCTREE if img.mode == 'RGBA' else Image.Quantize.MEDIANCUT
            dither = Image.Dither.FLOYDSTEINBERG if plan.indexed_color.dither else Image.Dither.NONE
            img = img.quantize(colors=colors, method=method, dither=dither)

        return img

    @staticmethod
    def _flatten_alpha(img: Image.Image) -> Image.Image:
        rgba = img.convert('RGBA')
        background = Image.new('RGB', rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel('A'))
        return background

    def _save_options(self, plan: TransformPlan, image_format: str) -> Dict[str, Any]:
        compression = plan.compression
        options: Dict[str, Any] = {}

        if image_format == 'JPEG':
            options['optimize'] = True
            if compression.quality is not None:
                options['quality'] = compression.quality
            if compression.sampling_factor in self.SUBSAMPLING:
                options['subsampling'] = self.SUBSAMPLING[compression.sampling_factor]

        elif image_format == 'PNG':
            options['optimize'] = True
            if plan.indexed_color:
                options['bits'] = plan.indexed_color.bit_depth

        elif image_format == 'GIF':
            options['optimize'] = True

        elif image_format == 'WEBP':
            if compression.quality is not None:
                options['quality'] = compression.quality
            options['method'] = 6

        return options
