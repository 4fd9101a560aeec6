"""
Unified command orchestrator for duplicate scans.
This is the single source of truth for the scan workflow, used by the CLI and the Python API.

Usage:
    groups = scan_duplicates("~/Downloads", min_size_bytes=1024)

    # With progress and cancellation:
    stop = threading.Event()
    params = DeduplicationParams(root_dir="/data", min_size_bytes=0)
    groups, stats = DeduplicationCommand().execute(
        params,
        progress_callback=print_progress,
        stopped_flag=stop.is_set
    )
"""

import logging
from typing import List, Optional, Callable, Tuple, Iterable

from twinsweep.core.models import DuplicateGroup, DeduplicationStats, DeduplicationParams
from twinsweep.core.interfaces import FileSystem, TrashLocation
from twinsweep.core.scanner import FileScannerImpl
from twinsweep.core.hasher import HasherImpl
from twinsweep.core.grouper import FileGrouperImpl
from twinsweep.core.deduplicator import DeduplicatorImpl
from twinsweep.core.assembler import GroupAssemblerImpl
from twinsweep.services.file_service import FileService

logger = logging.getLogger(__name__)


class DeduplicationCommand:
    """
    Orchestrates the whole workflow:
    1. Walk the root directory lazily
    2. Feed candidates through size → prefix hash → full hash → assembly
    """

    def __init__(self, fs: Optional[FileSystem] = None):
        self.fs = fs

    def execute(
            self,
            params: DeduplicationParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None,
            excluded_dirs: Optional[List[str]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Execute a duplicate scan with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if operation should stop)
            excluded_dirs: Directories never entered (e.g. a trash directory inside the root)

        Returns:
            Tuple of (duplicate_groups, statistics)

        Raises:
            ValueError: If the root directory is missing or not a directory
        """
        scanner = FileScannerImpl(
            root_dir=params.root_dir,
            min_size=params.min_size_bytes,
            excluded_dirs=excluded_dirs,
            fs=self.fs
        )
        files = scanner.scan(
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )

        grouper = FileGrouperImpl(HasherImpl(fs=self.fs), workers=params.workers)
        return DeduplicatorImpl(grouper).find_duplicates(
            files,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )


def scan_duplicates(
        root: str,
        min_size_bytes: int = 0,
        workers: Optional[int] = None,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
) -> List[DuplicateGroup]:
    """Finds duplicate groups under `root`, ordered by wasted bytes (largest first)."""
    params = DeduplicationParams(root_dir=root, min_size_bytes=min_size_bytes, workers=workers)
    groups, _ = DeduplicationCommand().execute(
        params,
        progress_callback=progress_callback,
        stopped_flag=stopped_flag
    )
    return groups


def scan_directories(
        roots: Iterable[str],
        min_size_bytes: int = 0,
        workers: Optional[int] = None,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
) -> List[DuplicateGroup]:
    """
    Scans each root on its own and merges the results.
    Roots the walker rejects (missing, not a directory) are skipped with a warning;
    duplicates spanning two roots are not detected.
    """
    results = []
    for root in roots:
        if stopped_flag and stopped_flag():
            break
        params = DeduplicationParams(root_dir=root, min_size_bytes=min_size_bytes, workers=workers)
        try:
            groups, _ = DeduplicationCommand().execute(
                params,
                progress_callback=progress_callback,
                stopped_flag=stopped_flag
            )
        except ValueError as e:
            logger.warning(f"Skipping {root}: {e}")
            continue
        results.append(groups)
    return GroupAssemblerImpl.merge(*results)


def delete(path: str) -> None:
    """Permanently removes `path`; a missing file is not an error."""
    FileService.delete(path)


def move_to_trash(path: str, trash: Optional[TrashLocation] = None) -> Optional[str]:
    """Moves `path` to the trash (platform trash by default); a missing file is not an error."""
    return FileService.move_to_trash(path, trash=trash)
