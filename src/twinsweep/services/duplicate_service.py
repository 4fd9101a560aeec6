"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/duplicate_service.py
Bookkeeping on scan results once the caller starts removing files.
Groups are snapshots, so every method returns new records instead of mutating them.
"""
from typing import Iterable, List, Tuple

from twinsweep.core.models import DuplicateGroup


class DuplicateService:
    @staticmethod
    def remove_files_from_groups(groups: List[DuplicateGroup], file_paths: Iterable[str]) -> List[DuplicateGroup]:
        """
        Removes files with the specified paths from all duplicate groups.

        Groups that contain fewer than 2 files after removal are discarded.

        Args:
            groups: List of duplicate groups to update.
            file_paths: Paths of files that were deleted or trashed.

        Returns:
            Updated list of duplicate groups, in the original order.
        """
        removed = set(file_paths)
        updated_groups = []
        for group in groups:
            remaining = [f for f in group.files if f.path not in removed]
            if len(remaining) == len(group.files):
                updated_groups.append(group)
            elif len(remaining) >= 2:
                updated_groups.append(DuplicateGroup(hash=group.hash, file_size=group.file_size, files=remaining))
        return updated_groups

    @staticmethod
    def keep_only_one_file_per_group(groups: List[DuplicateGroup]) -> Tuple[List[str], List[DuplicateGroup]]:
        """
        Keeps the first file of every group and marks the rest for deletion.
        Returns:
            - List of file paths to be deleted
            - Updated list of duplicate groups (empty once every group is reduced to one file)
        """
        files_to_delete = []
        for group in groups:
            files_to_delete.extend(f.path for f in group.files[1:])

        updated_groups = DuplicateService.remove_files_from_groups(groups, files_to_delete)
        return files_to_delete, updated_groups

    @staticmethod
    def total_wasted(groups: Iterable[DuplicateGroup]) -> int:
        """Bytes that would be reclaimed by keeping one file of every group."""
        return sum(group.total_wasted for group in groups)
