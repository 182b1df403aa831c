"""Data models for image reduction runs."""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


@dataclass
class TreeEntry:
    """A filesystem object seen during traversal."""
    path: str
    relative_dir: str
    name: str
    extension: str
    extension_lower: str
    size: int
    is_directory: bool

    @property
    def basename(self) -> str:
        """File name without its extension."""
        return self.name[:len(self.name) - len(self.extension)] if self.extension else self.name

    @property
    def relative_path(self) -> str:
        return os.path.join(self.relative_dir, self.name) if self.relative_dir else self.name


@dataclass(frozen=True)
class ScanConfiguration:
    """Validated, read-only run parameters."""
    source_path: str
    dest_path: str
    recursive: bool = False
    max_width: Optional[int] = None
    max_height: Optional[int] = None
    min_size_reduction: int = 0
    quality: Optional[int] = None
    jpeg_blur: Optional[float] = None
    force_direct_color_output_format: Optional[str] = None
    force_indexed_color_output_format: Optional[str] = None
    force_png_to_indexed: bool = False
    force_png_to_jpg: bool = False
    direct_color_bit_depth: Optional[int] = None
    indexed_color_bit_depth: Optional[int] = None
    max_depth: Optional[int] = None
    verbose: bool = False


@dataclass(frozen=True)
class ImageProbe:
    """Metadata read from a source image before transforming it."""
    width: int
    height: int
    is_direct_color: bool


@dataclass(frozen=True)
class ColorDepthDirective:
    bit_depth: int
    palette_size: int
    dither: bool = False
    interlace: bool = False


@dataclass(frozen=True)
class CompressionDirective:
    quality: Optional[int] = None
    blur: Optional[float] = None
    sampling_factor: Optional[Tuple[int, int]] = None


@dataclass(frozen=True)
class TransformPlan:
    """Fully resolved parameters for transforming one image."""
    width: int
    height: int
    target_extension: str
    destination: str
    compression: CompressionDirective
    direct_color: Optional[ColorDepthDirective] = None
    indexed_color: Optional[ColorDepthDirective] = None
    strip_metadata: bool = True
    flatten: bool = True


class FileOutcome(Enum):
    """What happened to a visited file."""
    OPTIMIZED = "optimized"
    COPIED = "copied"
    IGNORED = "ignored"


@dataclass
class FileCounts:
    total: int = 0
    optimized: int = 0
    copied: int = 0
    ignored: int = 0


@dataclass
class DirCounts:
    total: int = 0


@dataclass
class DataTotals:
    original: int = 0
    optimized: int = 0


@dataclass
class RunStats:
    """Aggregate counters for a whole run.

    Every visited file increments ``files.total`` and exactly one of
    ``optimized``, ``copied`` or ``ignored``. ``data.original`` receives the
    source size of every visited file, ``data.optimized`` only the sizes of
    optimized and copied files.
    """
    files: FileCounts = field(default_factory=FileCounts)
    dirs: DirCounts = field(default_factory=DirCounts)
    data: DataTotals = field(default_factory=DataTotals)

    @property
    def saved_bytes(self) -> int:
        return self.data.original - self.data.optimized

    @property
    def size_percentage(self) -> float:
        """Optimized data as a percentage of the original data."""
        if self.data.original == 0:
            return 0.0
        return self.data.optimized / self.data.original * 100

    @property
    def ratio(self) -> float:
        if self.data.optimized == 0:
            return 0.0
        return self.data.original / self.data.optimized

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': {
                'total': self.files.total,
                'optimized': self.files.optimized,
                'copied': self.files.copied,
                'ignored': self.files.ignored,
            },
            'dirs': {'total': self.dirs.total},
            'data': {
                'original': self.data.original,
                'optimized': self.data.optimized,
            },
        }


@dataclass
class WalkSummary:
    """Number of entries a traversal visited."""
    files: int = 0
    dirs: int = 0
