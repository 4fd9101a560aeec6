"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements the tree walker: a lazy, recursive directory scan that yields candidate files.
Features:
- Goes through an injectable FileSystem, so tests can run against an in-memory tree
- Skips hidden entries (any path segment below the root starting with '.')
- Never follows or yields symbolic links below the root (a linked root is accepted)
- Drops empty files and files below the minimum size
- Skips unreadable entries instead of aborting
"""

import os
import stat
import time
import logging
from typing import List, Optional, Callable, Iterator

from twinsweep.core.models import File, DeduplicationConfig
from twinsweep.core.interfaces import FileScanner, FileSystem
from twinsweep.core.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Scans a directory tree depth-first and yields files that pass the filters.

    Attributes:
        root_dir: Root directory to scan
        min_size: Minimum file size in bytes (inclusive)
        excluded_dirs: Directories whose subtrees are never entered
        fs: Filesystem access layer
    """

    def __init__(
        self,
        root_dir: str,
        min_size: int = 0,
        excluded_dirs: Optional[List[str]] = None,
        fs: Optional[FileSystem] = None
    ):
        self.root_dir = root_dir
        self.min_size = min_size
        self.excluded_dirs = [os.path.abspath(d) for d in excluded_dirs] if excluded_dirs else []
        self.fs = fs or LocalFileSystem()

    def scan(self,
             stopped_flag: Optional[Callable[[], bool]] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> Iterator[File]:
        """
        Validates the root and returns a generator over candidate files.
        Raises ValueError right away if the root is empty, missing or not a directory.
        """
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        root = os.path.abspath(self.root_dir)
        try:
            # The root may itself be a link (e.g. macOS /tmp); links below it are never followed
            root_stat = self.fs.stat(root, follow_symlinks=True)
        except FileNotFoundError:
            raise ValueError(f"Directory does not exist: {self.root_dir}")
        except OSError as e:
            raise ValueError(f"Cannot access directory {self.root_dir}: {e}") from e

        if not stat.S_ISDIR(root_stat.st_mode):
            raise ValueError(f"Not a directory: {self.root_dir}")

        return self._walk(root, stopped_flag, progress_callback)

    def _walk(self,
              root: str,
              stopped_flag: Optional[Callable[[], bool]],
              progress_callback: Optional[Callable[[str, int, object], None]]) -> Iterator[File]:
        logger.debug(f"Scanning directory: {root} (min_size={self.min_size})")
        start_time = time.time()
        processed = 0
        accepted = 0
        pending = [root]

        while pending:
            if stopped_flag and stopped_flag():
                logger.debug("Scan interrupted by user")
                return

            directory = pending.pop()
            try:
                names = sorted(self.fs.list_dir(directory))
            except OSError as e:
                logger.debug(f"Skipping unreadable directory {directory}: {e}")
                continue

            subdirs = []
            for name in names:
                if stopped_flag and stopped_flag():
                    logger.debug("Scan interrupted by user")
                    return

                if name.startswith('.'):
                    continue

                path = os.path.join(directory, name)
                try:
                    st = self.fs.stat(path)
                except OSError as e:
                    logger.debug(f"Could not stat {path}: {e}")
                    continue

                if stat.S_ISLNK(st.st_mode):
                    logger.debug(f"Skipping symbolic link: {path}")
                    continue

                if stat.S_ISDIR(st.st_mode):
                    if self._is_excluded_directory(path):
                        logger.debug(f"Skipping excluded directory: {path}")
                    else:
                        subdirs.append(path)
                    continue

                if not stat.S_ISREG(st.st_mode):
                    continue

                processed += 1
                if progress_callback and processed % DeduplicationConfig.PROGRESS_INTERVAL == 0:
                    progress_callback('Scanning', processed, None)

                file = self._process_file(path, st.st_size)
                if file:
                    accepted += 1
                    yield file

            # Reversed so the stack pops subdirectories in name order
            pending.extend(reversed(subdirs))

        if progress_callback:
            progress_callback('Scanning', processed, None)

        logger.debug(
            f"Scan completed in {time.time() - start_time:.2f}s: "
            f"{accepted} of {processed} files accepted"
        )

    def _process_file(self, path: str, size: int) -> Optional[File]:
        """Returns a File if it passes the size filters, else None."""
        if size == 0:
            logger.debug(f"Skipping zero-byte file: {path}")
            return None

        if size < self.min_size:
            logger.debug(f"Skipping {path} (size {size} bytes below minimum)")
            return None

        return File(path=path, size=size)

    def _is_excluded_directory(self, path: str) -> bool:
        """Check if path is one of, or inside, the excluded directories."""
        for excluded_dir in self.excluded_dirs:
            if path == excluded_dir or path.startswith(excluded_dir + os.sep):
                return True
        return False
