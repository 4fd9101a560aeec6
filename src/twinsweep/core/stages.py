"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/stages.py
Pipeline stages of the duplicate detection engine.

CLASS HIERARCHY
---------------
SizeStageImpl     : Buckets candidate files by exact size (SizeStage interface)
HashStageBase     : Shared batching, progress and cancellation for digest stages
PrefixHashStage   : Splits size buckets by the digest of the first 8 KiB
FullHashStage     : Splits prefix buckets by the digest of the whole content

STAGE CONTRACTS
---------------
Each stage implements a `process()` method that:
  • Accepts candidate groups from the previous stage
  • Returns refined groups (two or more files each) for the next stage
  • Reports progress via callback (stage name, processed count, total count)
  • Respects cancellation via stopped_flag callback, returning [] when stopped

Size singletons are pruned before any file is opened, so a file with a unique
size is never read.
"""

import logging
from typing import List, Dict, Optional, Callable, Iterable, Iterator

from twinsweep.core.models import File, CandidateGroup, Stage
from twinsweep.core.grouper import FileGrouperImpl
from twinsweep.core.interfaces import SizeStage, HashStage

logger = logging.getLogger(__name__)


class SizeStageImpl(SizeStage):
    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper

    def process(
            self,
            files: Iterable[File],
            stopped_flag: Optional[Callable[[], bool]] = None,
            progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        """
        Group by file size.
        Returns list of CandidateGroups with 2+ files of same size.
        """
        if stopped_flag and stopped_flag():
            return []

        seen = 0

        def counted(source: Iterable[File]) -> Iterator[File]:
            nonlocal seen
            for file in source:
                seen += 1
                yield file

        size_groups = self.grouper.group_by_size(counted(files))

        if stopped_flag and stopped_flag():
            return []

        groups = [
            CandidateGroup(size=size, files=files_list)
            for size, files_list in size_groups.items()
        ]

        if progress_callback:
            total_files = seen
            progress_callback(Stage.SIZE.display_name, total_files, total_files)

        logger.debug(f"Size stage: {seen} files -> {len(groups)} groups")
        return groups


# =============================
# Hashing Base Class
# =============================
class HashStageBase(HashStage):
    """
    Abstract base class for stages that split groups by a digest.
    Groups are hashed in batches so that the worker pool stays busy
    and progress is reported while the stage runs.
    """

    BATCH_FILES = 256

    def __init__(self, grouper: FileGrouperImpl):
        self.grouper = grouper
        # Files whose digest was actually computed in the last process() call
        self.hashed_files = 0

    def get_stage_name(self) -> str:
        raise NotImplementedError

    def _split(self, files: List[File], stopped_flag: Optional[Callable[[], bool]]) -> Dict[bytes, List[File]]:
        """
        Splits a batch of files into digest buckets of two or more files.
        A digest never spans two input groups, so batches can be split independently.
        """
        raise NotImplementedError

    def _make_group(self, key, files: List[File]) -> CandidateGroup:
        raise NotImplementedError

    def process(
        self,
        groups: List[CandidateGroup],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> List[CandidateGroup]:
        self.hashed_files = 0
        if stopped_flag and stopped_flag():
            return []

        refined = []
        total_files = sum(len(group.files) for group in groups)
        processed_files = 0

        with self.grouper.session():
            for batch in self._batches(groups):
                if stopped_flag and stopped_flag():
                    logger.debug(f"{self.get_stage_name()} interrupted by user")
                    return []

                hashed_before = self.grouper.hashed_count
                buckets = self._split(batch, stopped_flag)
                self.hashed_files += self.grouper.hashed_count - hashed_before

                if stopped_flag and stopped_flag():
                    logger.debug(f"{self.get_stage_name()} interrupted by user")
                    return []

                refined.extend(self._make_group(key, files) for key, files in buckets.items())

                processed_files += len(batch)
                if progress_callback:
                    progress_callback(self.get_stage_name(), processed_files, total_files)

        logger.debug(f"{self.get_stage_name()}: {total_files} files -> {len(refined)} groups")
        return refined

    def _batches(self, groups: List[CandidateGroup]) -> Iterator[List[File]]:
        """Yields flat file lists made of whole groups."""
        batch = []
        for group in groups:
            batch.extend(group.files)
            if len(batch) >= self.BATCH_FILES:
                yield batch
                batch = []
        if batch:
            yield batch


# =============================
# Individual Stages
# =============================
class PrefixHashStage(HashStageBase):
    def get_stage_name(self) -> str:
        return Stage.PREFIX.display_name

    def _split(self, files, stopped_flag):
        return self.grouper.group_by_prefix_hash(files, stopped_flag=stopped_flag)

    def _make_group(self, key, files):
        size, _ = key
        return CandidateGroup(size=size, files=files)


class FullHashStage(HashStageBase):
    def get_stage_name(self) -> str:
        return Stage.FULL.display_name

    def _split(self, files, stopped_flag):
        return self.grouper.group_by_full_hash(files, stopped_flag=stopped_flag)

    def _make_group(self, key, files):
        return CandidateGroup(size=files[0].size, files=files, digest=key)
