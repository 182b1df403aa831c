"""
Image Reducer - Mirror a directory tree while shrinking the images in it.

This package walks a source tree, recreates its directories at a destination,
and writes a resized, recompressed copy of every supported image, keeping the
original whenever the optimized version turns out no smaller.
"""

__version__ = "1.0.0"

from .core.reducer import ImageReducer, run
from .core.scanner import DirectoryScanner
from .core.models import RunStats, ScanConfiguration

__all__ = ["ImageReducer", "DirectoryScanner", "RunStats", "ScanConfiguration", "run"]
