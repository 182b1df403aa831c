"""Executes transform plans and keeps the result only when it is smaller."""

import logging
import os
import shutil

from .engine import TransformEngine
from .models import FileOutcome, RunStats, TransformPlan, TreeEntry


class VerificationController:
    """Runs a TransformPlan and falls back to a verbatim copy when it does not pay off."""

    def __init__(self, engine: TransformEngine, stats: RunStats, dest_path: str):
        """Initialize verification controller.

        Args:
            engine: Transform engine that writes the optimized artifact.
            stats: Run statistics updated with each outcome.
            dest_path: Destination root of the mirrored tree.
        """
        self.engine = engine
        self.stats = stats
        self.dest_path = dest_path
        self.logger = logging.getLogger(__name__)

    def apply(self, plan: TransformPlan, entry: TreeEntry) -> FileOutcome:
        """Write the optimized image and verify it is strictly smaller than the source.

        Returns:
            FileOutcome.OPTIMIZED if the artifact was kept, FileOutcome.COPIED if
            the source was copied instead.

        Raises:
            TransformError: If the engine fails to write the artifact.
            OSError: If statting, deleting or copying fails.
        """
        self.engine.write(entry.path, plan)

        artifact_size = os.stat(plan.destination).st_size

        if artifact_size < entry.size:
            self.stats.files.optimized += 1
            self.stats.data.optimized += artifact_size
            self.logger.debug(f"Kept {plan.destination}: {entry.size} -> {artifact_size} bytes")
            return FileOutcome.OPTIMIZED

        self.use_original(plan, entry)
        return FileOutcome.COPIED

    def use_original(self, plan: TransformPlan, entry: TreeEntry) -> None:
        """Remove the optimized artifact and copy the source file in its place."""
        os.remove(plan.destination)

        target_file = os.path.join(self.dest_path, entry.relative_dir, entry.name)
        shutil.copyfile(entry.path, target_file)

        self.stats.files.copied += 1
        self.stats.data.optimized += entry.size
        self.logger.debug(f"Copied {entry.path} to {target_file}: optimized file was not smaller")
