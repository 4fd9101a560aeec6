"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/assembler.py
Turns confirmed full-digest buckets into DuplicateGroup records and orders them.

Ordering rules:
1. Groups by total wasted bytes, largest first
2. Ties broken by hash (ascending hex) so output is reproducible
3. Members inside a group by path (ascending)
"""
import logging
from typing import List

from twinsweep.core.models import CandidateGroup, DuplicateGroup, DuplicateFile
from twinsweep.core.interfaces import GroupAssembler

logger = logging.getLogger(__name__)


class GroupAssemblerImpl(GroupAssembler):

    def assemble(self, groups: List[CandidateGroup]) -> List[DuplicateGroup]:
        """Builds one DuplicateGroup per confirmed bucket of two or more files."""
        duplicates = []
        for group in groups:
            if group.digest is None:
                raise ValueError("Cannot assemble a group without a full-content digest")
            if len(group.files) < 2:
                continue

            members = sorted(group.files, key=lambda f: f.path)
            duplicates.append(DuplicateGroup(
                hash=group.digest.hex(),
                file_size=group.size,
                files=[DuplicateFile(path=f.path, name=f.name) for f in members],
            ))

        GroupAssemblerImpl.sort_groups(duplicates)
        logger.debug(f"Assembled {len(duplicates)} duplicate groups")
        return duplicates

    @staticmethod
    def sort_groups(groups: List[DuplicateGroup]) -> None:
        """Sorts groups in place: most wasted bytes first, then by hash."""
        groups.sort(key=lambda g: (-g.total_wasted, g.hash))

    @staticmethod
    def merge(*group_lists: List[DuplicateGroup]) -> List[DuplicateGroup]:
        """
        Concatenates results of independent scans (e.g. several roots) and re-sorts them.
        Groups from different scans are never combined, even when their hashes match.
        """
        merged = [group for groups in group_lists for group in groups]
        GroupAssemblerImpl.sort_groups(merged)
        return merged
