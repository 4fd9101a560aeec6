"""
twinsweep finds files with byte-identical content and reclaims the space they waste.

Core features:
- Staged detection: size → SHA-256 of the first 8 KiB → streamed SHA-256 of the whole file
- Hashing on a bounded thread pool with cooperative cancellation
- Safe deletion to the system trash (via send2trash) or to a plain directory
- CLI interface for headless/server usage
"""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("twinsweep")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from twinsweep.commands import (
    DeduplicationCommand, scan_duplicates, scan_directories, delete, move_to_trash)
from twinsweep.core import (
    DeduplicationParams, DeduplicationStats, DuplicateGroup, DuplicateFile, File)
from twinsweep.utils.convert_utils import ConvertUtils
from twinsweep.services import DuplicateService, FileService, SystemTrash, DirectoryTrash

__all__ = [
    "DeduplicationCommand",
    "scan_duplicates",
    "scan_directories",
    "delete",
    "move_to_trash",
    "DeduplicationParams",
    "DeduplicationStats",
    "DuplicateGroup",
    "DuplicateFile",
    "File",
    "ConvertUtils",
    "DuplicateService",
    "FileService",
    "SystemTrash",
    "DirectoryTrash",
    "__version__",
]
