"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements file bucketing by size, prefix digest and full digest.

Hash-based grouping fans out over a bounded thread pool: each task hashes one
file end to end and returns its digest, and buckets are built on the calling
thread from the collected results, so no shared map is locked per insert.
Inside `session()` one pool serves every call, so batched stages do not
start and stop threads per batch.
Files that cannot be read are dropped from the result.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import List, Dict, Tuple, Any, Callable, Optional, Iterable, Iterator

from twinsweep.core.interfaces import FileGrouper, Hasher
from twinsweep.core.models import File, DeduplicationConfig
from twinsweep.core.hasher import HasherImpl

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    A concrete implementation of FileGrouper.
    Uses an injected Hasher instance for flexibility and testability.
    """

    def __init__(self, hasher: Optional[Hasher] = None, workers: Optional[int] = None):
        self.hasher = hasher or HasherImpl()
        self.workers = workers or DeduplicationConfig.default_workers()
        # Running total of files that produced a digest
        self.hashed_count = 0
        self._pool: Optional[ThreadPoolExecutor] = None

    @contextmanager
    def session(self) -> Iterator[None]:
        """Keeps one worker pool alive for every hashing call made inside the block."""
        if self.workers <= 1 or self._pool is not None:
            yield
            return

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            self._pool = pool
            try:
                yield
            finally:
                self._pool = None

    def group_by_size(self, files: Iterable[File]) -> Dict[int, List[File]]:
        """Groups files by their size."""
        return self._group_by((file.size, file) for file in files)

    def group_by_prefix_hash(
        self,
        files: List[File],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[Tuple[int, bytes], List[File]]:
        """Groups files by (size, prefix digest)."""
        hashed = self._hash_all(files, self.hasher.compute_prefix_hash, stopped_flag)
        return self._group_by(((file.size, digest), file) for file, digest in hashed)

    def group_by_full_hash(
        self,
        files: List[File],
        stopped_flag: Optional[Callable[[], bool]] = None
    ) -> Dict[bytes, List[File]]:
        """Groups files by full content digest."""
        hashed = self._hash_all(files, self.hasher.compute_full_hash, stopped_flag)
        return self._group_by((digest, file) for file, digest in hashed)

    def _hash_all(
        self,
        files: List[File],
        hash_func: Callable[[File], bytes],
        stopped_flag: Optional[Callable[[], bool]]
    ) -> List[Tuple[File, bytes]]:
        """
        Hashes every file, in parallel when more than one worker is configured.
        Returns (file, digest) pairs in input order, without unreadable or skipped files.
        """
        def task(file: File) -> Optional[bytes]:
            if stopped_flag and stopped_flag():
                return None
            return self._safe_hash(hash_func, file)

        if self.workers <= 1 or len(files) < 2:
            digests = [task(file) for file in files]
        elif self._pool is not None:
            digests = list(self._pool.map(task, files))
        else:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(files))) as pool:
                digests = list(pool.map(task, files))

        hashed = [(file, digest) for file, digest in zip(files, digests) if digest is not None]
        self.hashed_count += len(hashed)
        return hashed

    @staticmethod
    def _safe_hash(hash_func: Callable[[File], bytes], file: File) -> Optional[bytes]:
        try:
            return hash_func(file)
        except OSError as e:
            logger.debug(f"Dropping unreadable file {file.path}: {e}")
            return None

    @staticmethod
    def _group_by(pairs: Iterable[Tuple[Any, File]]) -> Dict[Any, List[File]]:
        """
        Builds buckets from (key, file) pairs.
        Returns only buckets with at least two files.
        """
        groups = defaultdict(list)
        for key, file in pairs:
            groups[key].append(file)

        return {key: group for key, group in groups.items() if len(group) >= 2}
