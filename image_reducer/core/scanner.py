"""Directory traversal that mirrors a source tree into a destination tree."""

import os
import stat
import logging
from typing import Any, Callable, Optional
from .models import TreeEntry, WalkSummary


FileHandler = Callable[[TreeEntry], Any]
DirectoryHandler = Callable[[TreeEntry], Optional[bool]]


class DirectoryScanner:
    """Walks a directory tree depth-first, one entry at a time.

    Subdirectories are mirrored under the destination root before anything
    inside them is visited, and a subtree is drained completely before the
    next sibling is looked at. Errors are not caught: the first exception
    raised by listing, stat, mkdir or a handler ends the walk.
    """

    SKIPPED_NAMES = ('.', '..')

    def __init__(self, max_depth: Optional[int] = None):
        """Initialize directory scanner.

        Args:
            max_depth: Maximum number of directory levels to scan, the root
                       counting as the first. None means unbounded.
        """
        self.max_depth = max_depth
        self.logger = logging.getLogger(__name__)

    def walk(self, source_root: str, dest_root: str, recursive: bool,
             on_file: FileHandler, on_directory: Optional[DirectoryHandler] = None) -> WalkSummary:
        """Walk ``source_root`` and mirror its directories under ``dest_root``.

        Args:
            source_root: Directory to scan.
            dest_root: Directory receiving the mirrored structure.
            recursive: Descend into subdirectories.
            on_file: Called with each regular file's TreeEntry.
            on_directory: Called with each directory's TreeEntry before it is
                          mirrored. Returning False skips recursion into it.

        Returns:
            WalkSummary with the number of files and directories visited.
        """
        summary = WalkSummary()

        self.logger.info(f"Starting scan of {source_root}")
        self._walk_directory(source_root, '', dest_root, recursive,
                             on_file, on_directory, summary, depth=0)
        self.logger.info(f"Completed scan of {source_root}: "
                         f"{summary.files} files, {summary.dirs} directories")
        return summary

    def _walk_directory(self, directory: str, relative_dir: str, dest_root: str,
                        recursive: bool, on_file: FileHandler, on_directory: Optional[DirectoryHandler],
                        summary: WalkSummary, depth: int) -> None:
        """Visit every entry of one directory in listing order."""
        for name in os.listdir(directory):
            if name in self.SKIPPED_NAMES:
                continue

            full_path = os.path.join(directory, name)
            entry_stat = os.stat(full_path)

            if stat.S_ISDIR(entry_stat.st_mode):
                entry = self.make_entry(full_path, relative_dir, name, 0, True)
                summary.dirs += 1

                proceed = True
                if on_directory is not None:
                    proceed = on_directory(entry) is not False

                os.makedirs(os.path.join(dest_root, relative_dir, name), exist_ok=True)

                if recursive and proceed and self._may_descend(depth):
                    self._walk_directory(full_path, os.path.join(relative_dir, name),
                                         dest_root, recursive, on_file, on_directory, summary,
                                         depth=depth + 1)

            elif stat.S_ISREG(entry_stat.st_mode):
                entry = self.make_entry(full_path, relative_dir, name, entry_stat.st_size, False)
                summary.files += 1
                on_file(entry)

            else:
                self.logger.debug(f"Skipping {full_path}: not a regular file or directory")

    def _may_descend(self, depth: int) -> bool:
        if self.max_depth is None:
            return True
        return depth + 1 < self.max_depth

    @staticmethod
    def make_entry(full_path: str, relative_dir: str, name: str, size: int, is_directory: bool) -> TreeEntry:
        extension = os.path.splitext(name)[1]
        return TreeEntry(
            path=os.path.abspath(full_path),
            relative_dir=relative_dir,
            name=name,
            extension=extension,
            extension_lower=extension.lower(),
            size=size,
            is_directory=is_directory
        )
