"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/deduplicator.py
Implements the pipeline-based duplicate detection engine:
    size → prefix hash → full hash → group assembly
"""
import time
import logging
from typing import List, Tuple, Optional, Callable, Iterable

from twinsweep.core.models import File, CandidateGroup, DuplicateGroup, DeduplicationStats, Stage
from twinsweep.core.grouper import FileGrouperImpl
from twinsweep.core.assembler import GroupAssemblerImpl
from twinsweep.core.interfaces import Deduplicator, HashStage, GroupAssembler
from twinsweep.core.stages import SizeStageImpl, PrefixHashStage, FullHashStage

logger = logging.getLogger(__name__)


# =============================
# Main Deduplicator Class
# =============================
class DeduplicatorImpl(Deduplicator):
    """
    Implements multi-stage duplicate detection using a pipeline architecture
    and collects detailed statistics.
    """
    def __init__(self, grouper: Optional[FileGrouperImpl] = None, assembler: Optional[GroupAssembler] = None):
        self.grouper = grouper or FileGrouperImpl()
        self.assembler = assembler or GroupAssemblerImpl()

    def find_duplicates(
        self,
        files: Iterable[File],
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Tuple[List[DuplicateGroup], DeduplicationStats]:
        """
        Main duplicate detection pipeline.
        Args:
            files: Candidate files, typically the walker's lazy iterator
            stopped_flag: Function that returns True if the operation should be stopped.
            progress_callback: Reports progress per stage.
        Returns:
            Tuple[List[DuplicateGroup], DeduplicationStats]; the list is empty if cancelled.
        """
        stats = DeduplicationStats()
        total_start_time = time.time()

        size_stage = SizeStageImpl(self.grouper)
        start_time = time.time()
        groups = size_stage.process(
            files,
            stopped_flag=stopped_flag,
            progress_callback=progress_callback
        )
        DeduplicatorImpl._update_stats(stats, Stage.SIZE, time.time() - start_time, groups)

        for stage_key, stage in self._build_pipeline():
            if not groups:
                break
            start_time = time.time()
            groups = stage.process(
                groups,
                stopped_flag=stopped_flag,
                progress_callback=progress_callback
            )
            stats.record_hashed(stage_key.value, stage.hashed_files)
            DeduplicatorImpl._update_stats(stats, stage_key, time.time() - start_time, groups)

        if stopped_flag and stopped_flag():
            logger.info("Duplicate search cancelled")
            stats.total_time = time.time() - total_start_time
            return [], stats

        start_time = time.time()
        duplicates = self.assembler.assemble(groups)
        stats.update_stage(
            stage_name=Stage.ASSEMBLY.value,
            groups_found=len(duplicates),
            files_processed=sum(g.duplicate_count for g in duplicates),
            duration=time.time() - start_time
        )

        stats.total_time = time.time() - total_start_time
        logger.info(
            f"Found {len(duplicates)} duplicate groups "
            f"({sum(g.total_wasted for g in duplicates)} bytes reclaimable) "
            f"in {stats.total_time:.2f}s"
        )
        return duplicates, stats

    def _build_pipeline(self) -> List[Tuple[Stage, HashStage]]:
        return [
            (Stage.PREFIX, PrefixHashStage(self.grouper)),
            (Stage.FULL, FullHashStage(self.grouper)),
        ]

    @staticmethod
    def _update_stats(
        stats: DeduplicationStats,
        stage: Stage,
        duration: float,
        groups: List[CandidateGroup]
    ):
        stats.update_stage(
            stage_name=stage.value,
            groups_found=len(groups),
            files_processed=sum(len(g.files) for g in groups),
            duration=duration
        )
