"""Main image reduction coordinator."""

import gzip
import logging
import os
import shutil
from typing import Optional

from .engine import PillowTransformEngine, TransformEngine
from .models import FileOutcome, RunStats, ScanConfiguration, TreeEntry
from .planner import OptimizationPlanner
from .scanner import DirectoryScanner
from .verifier import VerificationController


SUPPORTED_EXTENSIONS = frozenset(['.gif', '.jpg', '.jpeg', '.png', '.svg'])
SVG_SUFFIX = '.gz'
GZIP_LEVEL = 9


class ImageReducer:
    """Mirrors a source tree into a destination tree, optimizing images on the way."""

    def __init__(self, config: ScanConfiguration, engine: Optional[TransformEngine] = None):
        """Initialize image reducer.

        Args:
            config: Validated run configuration.
            engine: Transform engine to use. Defaults to the Pillow engine.
        """
        self.config = config
        self.engine = engine or PillowTransformEngine()
        self.stats = RunStats()
        self.scanner = DirectoryScanner(max_depth=config.max_depth)
        self.planner = OptimizationPlanner()
        self.verifier = VerificationController(self.engine, self.stats, config.dest_path)
        self.logger = logging.getLogger(__name__)

    def run(self) -> RunStats:
        """Process the whole source tree.

        Returns:
            Statistics for the completed run.

        Raises:
            OSError, TransformError: The first failure met; nothing after it is processed.
        """
        self.logger.info(f"Reducing images from {self.config.source_path} into {self.config.dest_path}")

        try:
            os.makedirs(self.config.dest_path, exist_ok=True)
            self.scanner.walk(
                self.config.source_path,
                self.config.dest_path,
                self.config.recursive,
                self.process_file,
                self.process_directory
            )
        except Exception as e:
            self.logger.error(f"Run aborted: {e}")
            raise

        self.logger.info(f"Run complete: {self.stats.files.total} files, "
                         f"{self.stats.files.optimized} optimized, {self.stats.files.copied} copied, "
                         f"{self.stats.files.ignored} ignored")
        return self.stats

    def process_file(self, entry: TreeEntry) -> FileOutcome:
        """Route one file to the optimizer, the SVG compressor or the ignore list."""
        self.stats.files.total += 1
        self.stats.data.original += entry.size

        self._log(f"File: {entry.path}")

        if not self.is_supported_extension(entry.extension_lower):
            self._log(f"    => Non-supported extension: {entry.extension or '(none)'}")
            self.stats.files.ignored += 1
            return FileOutcome.IGNORED

        if entry.extension_lower == '.svg':
            return self.compress_svg(entry)

        return self.optimize_image(entry)

    def process_directory(self, entry: TreeEntry) -> bool:
        self.stats.dirs.total += 1
        self._log(f"Directory: {entry.path}")
        return True

    def optimize_image(self, entry: TreeEntry) -> FileOutcome:
        probe = self.engine.probe(entry.path)
        plan = self.planner.plan(probe, entry, self.config)

        self._log(f"    => {probe.width}x{probe.height} -> {plan.width}x{plan.height}, "
                  f"format {plan.target_extension}")

        outcome = self.verifier.apply(plan, entry)

        if outcome is FileOutcome.OPTIMIZED:
            self._log(f"    => Optimized: {plan.destination}")
        else:
            self._log("    => Optimized file was not smaller, copied original")
        return outcome

    def compress_svg(self, entry: TreeEntry) -> FileOutcome:
        """Gzip an SVG file next to its mirrored location."""
        final_file = os.path.join(self.config.dest_path, entry.relative_dir, entry.name + SVG_SUFFIX)

        with open(entry.path, 'rb') as source, gzip.open(final_file, 'wb', compresslevel=GZIP_LEVEL) as target:
            shutil.copyfileobj(source, target)

        final_size = os.stat(final_file).st_size
        self.stats.files.optimized += 1
        self.stats.data.optimized += final_size

        self._log(f"    => Compressed: {final_file}")
        return FileOutcome.OPTIMIZED

    @staticmethod
    def is_supported_extension(extension: str) -> bool:
        return extension in SUPPORTED_EXTENSIONS

    def _log(self, message: str) -> None:
        """Log a per-file decision, visible at INFO level in verbose runs."""
        if self.config.verbose:
            self.logger.info(message)
        else:
            self.logger.debug(message)


def run(config: ScanConfiguration, engine: Optional[TransformEngine] = None) -> RunStats:
    """Reduce every image under ``config.source_path`` and return the run statistics."""
    return ImageReducer(config, engine).run()
