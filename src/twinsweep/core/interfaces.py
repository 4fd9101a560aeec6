"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/interfaces.py

Defines core interfaces (Protocols) used throughout the duplicate detection system.
These protocols enforce structural typing using Python's `typing.Protocol` so that
every stage can be tested against fakes (in-memory filesystem, counting hasher)
without touching the real disk.

Key Components:
---------------
- FileSystem: Narrow filesystem access (list, stat, open-for-read, create, rename, remove).
- HashAlgorithm: Streaming digest factory (SHA-256 by default).
- Hasher: Computes prefix and full-content digests of a file.
- FileScanner: Walks a directory tree and yields candidate files.
- FileGrouper: Buckets files by size, prefix digest and full digest.
- GroupAssembler: Turns confirmed buckets into ordered DuplicateGroup records.
- Deduplicator: Runs the whole pipeline.
- TrashLocation: Destination for recoverable deletes.
"""

from typing import Protocol, List, Dict, Tuple, Optional, Callable, Iterator, Iterable, BinaryIO, Any
from twinsweep.core.models import File, CandidateGroup, DuplicateGroup, DeduplicationStats


# ===== Interfaces =====

class FileSystem(Protocol):
    """
    Filesystem primitives used by the engine.

    `stat` does not follow symbolic links unless asked to (lstat semantics by
    default); the result exposes at least `st_mode` and `st_size`.
    `create_new` creates an empty file and raises FileExistsError if the path
    is already taken, so a name can be reserved atomically.
    """
    def list_dir(self, path: str) -> List[str]: ...
    def stat(self, path: str, follow_symlinks: bool = False) -> Any: ...
    def open_read(self, path: str) -> BinaryIO: ...
    def create_new(self, path: str) -> None: ...
    def rename(self, src: str, dst: str) -> None: ...
    def remove(self, path: str) -> None: ...


class DigestState(Protocol):
    """Incremental digest: update with bytes, finalize once."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic streaming hash algorithms.

    Implementations must be collision-resistant; the reported group hash is
    the hex form of the final digest.
    """
    name: str

    def new(self) -> DigestState:
        """Returns a fresh incremental digest object."""
        ...


class Hasher(Protocol):
    """Interface for hashing a prefix or the whole content of a file."""
    def compute_prefix_hash(self, file: File) -> bytes: ...
    def compute_full_hash(self, file: File) -> bytes: ...


class FileScanner(Protocol):
    """
    Interface for scanning file systems and collecting candidate files.
    """
    def scan(
        self,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Iterator[File]:
        """
        Lazily yield candidate files from the configured root directory.

        Args:
            stopped_flag: Function that returns True if the walk should stop.
            progress_callback: Optional callback (stage, current, total).
        """
        ...


class FileGrouper(Protocol):
    """
    Interface for bucketing files by size or content digest.
    Every method drops buckets with fewer than two files.
    """
    def group_by_size(self, files: Iterable[File]) -> Dict[int, List[File]]:
        """Group files by their size in bytes."""
        ...

    def group_by_prefix_hash(
        self,
        files: List[File],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, bytes], List[File]]:
        """Group same-size files by (size, prefix digest)."""
        ...

    def group_by_full_hash(
        self,
        files: List[File],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[bytes, List[File]]:
        """Group files by their full content digest."""
        ...


# =============================
# Stage Interfaces
# =============================


class SizeStage(Protocol):
    """First stage: bucket candidate files by exact size."""
    def process(
        self,
        files: Iterable[File],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        """
        Returns:
            Buckets of two or more same-size files.
        """
        ...


class HashStage(Protocol):
    """
    A stage that splits candidate groups by a content digest.
    Files not sharing a digest with another file are eliminated.
    """

    def get_stage_name(self) -> str:
        """Return the name of this stage (used in logging and stats)."""
        ...

    def process(
        self,
        groups: List[CandidateGroup],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        """
        Returns:
            Refined groups for the next stage, or [] if cancelled.
        """
        ...


class GroupAssembler(Protocol):
    """Builds the final, ordered list of duplicate groups."""
    def assemble(self, groups: List[CandidateGroup]) -> List[DuplicateGroup]: ...


class Deduplicator(Protocol):
    """
    Interface for the main duplicate detection engine.

    Coordinates size → prefix hash → full hash → assembly.
    """
    def find_duplicates(
        self,
        files: Iterable[File],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Run the pipeline over the candidate files.

        Returns:
            A tuple of the ordered duplicate groups and the collected statistics.
        """
        ...


class TrashLocation(Protocol):
    """Recoverable-delete destination (platform trash or a plain directory)."""
    def send(self, path: str) -> Optional[str]:
        """Moves `path` into the trash and returns where it went, if known."""
        ...
