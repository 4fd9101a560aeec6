"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for file scanning and duplicate detection.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Union, Callable
from enum import Enum
import os
import logging

from twinsweep.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)


# =============================
# Enums
# =============================

class Stage(str, Enum):
    SIZE = "size"
    PREFIX = "prefix"
    FULL = "full"
    ASSEMBLY = "assembly"

    @property
    def display_name(self) -> str:
        """Human-readable name for progress output."""
        mapping = {
            Stage.SIZE: "Size grouping",
            Stage.PREFIX: "Prefix Hash",
            Stage.FULL: "Full Hash",
            Stage.ASSEMBLY: "Group assembly",
        }
        return mapping.get(self, self.value)

    @classmethod
    def get_all(cls):
        return [cls.SIZE, cls.PREFIX, cls.FULL, cls.ASSEMBLY]


# =============================
# Configuration
# =============================

class DeduplicationConfig:
    PREFIX_SIZE = 8192  # bytes digested by the prefix stage
    READ_CHUNK_SIZE = 64 * 1024  # streaming buffer for the full-content stage
    PROGRESS_INTERVAL = 5000  # walker reports progress every N files

    @staticmethod
    def default_workers() -> int:
        # Hashing is I/O bound: a few more threads than cores keeps disks busy
        return min(32, (os.cpu_count() or 1) + 4)


# ======================
#  Core Data Models
# ======================

@dataclass
class FileHashes:
    prefix: Optional[bytes] = None
    full: Optional[bytes] = None

    def __post_init__(self):
        fields = getattr(self, '__dataclass_fields__', {})
        for key in fields:
            value = getattr(self, key)
            if value is not None and not isinstance(value, bytes):
                raise ValueError(f"Field '{key}' must be bytes or None")


@dataclass
class File:
    """
    A candidate file: a regular file that passed the walker's filters.
    Digests computed by the hasher are cached in `hashes`.
    """
    path: str
    size: int  # in bytes
    name: Optional[str] = None
    hashes: FileHashes = field(default_factory=FileHashes)

    def __post_init__(self):
        if self.name is None:
            self.name = os.path.basename(self.path)

    def __repr__(self):
        return f"<File path={self.path}, size={self.size}>"


@dataclass
class CandidateGroup:
    """
    A bucket of files that may still be duplicates.
    All files share `size`; `digest` is set once the full-content stage has confirmed them.
    """
    size: int
    files: List[File]
    digest: Optional[bytes] = None

    def __repr__(self):
        return f"<CandidateGroup size={self.size}, count={len(self.files)}>"


@dataclass(frozen=True)
class DuplicateFile:
    """One member of a duplicate group as reported to the caller."""
    path: str
    name: str

    @classmethod
    def from_path(cls, path: str) -> 'DuplicateFile':
        return cls(path=path, name=os.path.basename(path))


@dataclass(frozen=True)
class DuplicateGroup:
    """
    A set of byte-identical files.
    All members share `file_size` and the full-content SHA-256 `hash` (hex).
    The record is a snapshot: deleting a member on disk does not update it.
    """
    hash: str
    file_size: int
    files: List[DuplicateFile]

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError("A duplicate group needs at least two files")
        if self.file_size < 0:
            raise ValueError("File size cannot be negative")

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    @property
    def total_wasted(self) -> int:
        """Bytes reclaimed by removing all but one member."""
        return self.file_size * (len(self.files) - 1)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    def __repr__(self):
        return f"<DuplicateGroup hash={self.hash[:12]}, size={self.file_size}, count={len(self.files)}>"


class DeduplicationStats:
    """
    Statistics collected during the deduplication process.
    """
    def __init__(self):
        self.total_time: float = 0.0
        self.stage_stats: Dict[str, Dict[str, Union[int, float]]] = {}
        self.hashed_files: Dict[str, int] = {}
        self._listeners: List[Callable[[str, Dict], None]] = []

    def add_listener(self, listener: Callable[[str, Dict], None]):
        """Adds a listener to receive updates when stats are updated."""
        self._listeners.append(listener)

    def update_stage(
            self,
            stage_name: str,
            groups_found: int,
            files_processed: int,
            duration: float
    ) -> None:
        if stage_name not in self.stage_stats:
            self.stage_stats[stage_name] = {
                "groups": 0,
                "files": 0,
                "time": 0.0
            }
        self.stage_stats[stage_name]["groups"] += groups_found
        self.stage_stats[stage_name]["files"] += files_processed
        self.stage_stats[stage_name]["time"] += duration

        for listener in self._listeners:
            try:
                listener(stage_name, self.stage_stats[stage_name])
            except Exception:
                logger.exception("Error in stats event handler")

    def record_hashed(self, stage_name: str, count: int) -> None:
        """Counts files whose content was actually read in a hashing stage."""
        self.hashed_files[stage_name] = self.hashed_files.get(stage_name, 0) + count

    def print_summary(self) -> str:
        labels = {
            "size": "Size Groups",
            "prefix": "Prefix Hash Groups",
            "full": "Full Content Hash Groups",
            "assembly": "Duplicate Groups",
        }

        lines = [
            "Deduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s\n",
            "Stage: GROUPS / FILES / TIME"
        ]

        for stage, data in self.stage_stats.items():
            label = labels.get(stage.lower(), stage.title())
            lines.append(f"{label}: {data['groups']} / {data['files']} / {data['time']:.3f}s")

        if self.hashed_files:
            hashed = ", ".join(f"{name}={count}" for name, count in self.hashed_files.items())
            lines.append(f"Files hashed: {hashed}")

        return "\n".join(lines)


"""
DTO for deduplication parameters with built-in validation.
Interface-agnostic: used by both the CLI and the Python API.
"""

@dataclass
class DeduplicationParams:
    """Parameters for a duplicate scan with validation."""
    root_dir: str
    min_size_bytes: int = 0
    workers: Optional[int] = None

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.min_size_bytes < 0:
            raise ValueError("Minimum size cannot be negative")

        if self.workers is not None and self.workers < 1:
            raise ValueError("Worker count must be at least 1")

    @staticmethod
    def from_human_readable(
            root_dir: str,
            min_size_str: str = "0",
            workers: Optional[int] = None,
    ) -> 'DeduplicationParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        return DeduplicationParams(
            root_dir=root_dir,
            min_size_bytes=ConvertUtils.human_to_bytes(min_size_str),
            workers=workers,
        )
