"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Deletion executor: permanent removal and recoverable move-to-trash of single files.

Both operations treat a missing path as already done, so repeating a request
(or racing another deleter) is not an error. Neither touches DuplicateGroup
records produced by a scan.
"""
import os
import stat
import logging
from pathlib import Path
from typing import List, Optional

from send2trash import send2trash

from twinsweep.core.interfaces import FileSystem, TrashLocation
from twinsweep.core.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)


class SystemTrash(TrashLocation):
    """The platform trash (freedesktop Trash, macOS ~/.Trash, Recycle Bin) via send2trash."""

    def send(self, path: str) -> Optional[str]:
        send2trash(path)
        # send2trash picks the final name itself
        return None


class DirectoryTrash(TrashLocation):
    """
    A plain directory used as trash.
    Keeps the original file name; on a clash appends " (1)", " (2)", ... before the extension.
    A name is claimed with an exclusive create before the move, so concurrent sends
    into the same directory never replace each other's files.
    """

    def __init__(self, directory: str, fs: Optional[FileSystem] = None):
        self.directory = os.path.abspath(directory)
        self.fs = fs or LocalFileSystem()

    def send(self, path: str) -> str:
        os.makedirs(self.directory, exist_ok=True)
        destination = self.reserve_name(os.path.basename(path))
        try:
            # Replaces our own empty placeholder
            self.fs.rename(path, destination)
        except OSError:
            self._release(destination)
            raise
        return destination

    def reserve_name(self, file_name: str) -> str:
        """Claims a free path inside the trash directory by creating an empty placeholder there."""
        stem, suffix = os.path.splitext(file_name)
        candidate = os.path.join(self.directory, file_name)
        counter = 1
        while True:
            try:
                self.fs.create_new(candidate)
                return candidate
            except FileExistsError:
                candidate = os.path.join(self.directory, f"{stem} ({counter}){suffix}")
                counter += 1

    def _release(self, placeholder: str) -> None:
        try:
            self.fs.remove(placeholder)
        except OSError as e:
            logger.warning(f"Could not remove trash placeholder {placeholder}: {e}")


class FileService:
    """
    Single-file delete and trash operations.
    Failures surface as RuntimeError chained from the underlying OSError.
    """

    @staticmethod
    def delete(file_path: str, fs: Optional[FileSystem] = None) -> None:
        """Permanently removes a file. A missing file counts as success."""
        fs = fs or LocalFileSystem()
        if not FileService._check_target(file_path, fs):
            return

        try:
            fs.remove(file_path)
        except FileNotFoundError:
            logger.debug(f"Already gone: {file_path}")
            return
        except OSError as e:
            raise RuntimeError(f"Failed to delete file: {e}") from e

        logger.info(f"Deleted {file_path}")

    @staticmethod
    def move_to_trash(
        file_path: str,
        trash: Optional[TrashLocation] = None,
        fs: Optional[FileSystem] = None
    ) -> Optional[str]:
        """
        Moves a file to the trash. A missing file counts as success.
        Returns the new location when the trash reports one.
        """
        fs = fs or LocalFileSystem()
        if not FileService._check_target(file_path, fs):
            return None

        trash = trash or SystemTrash()
        try:
            destination = trash.send(file_path)
        except FileNotFoundError:
            logger.debug(f"Already gone: {file_path}")
            return None
        except OSError as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

        logger.info(f"Moved {file_path} to trash" + (f" as {destination}" if destination else ""))
        return destination

    @classmethod
    def delete_multiple(cls, file_paths: List[str], fs: Optional[FileSystem] = None) -> None:
        """Deletes every path, then raises once if any of them failed."""
        cls._apply_all(file_paths, lambda p: cls.delete(p, fs=fs), "delete")

    @classmethod
    def move_multiple_to_trash(
        cls,
        file_paths: List[str],
        trash: Optional[TrashLocation] = None,
        fs: Optional[FileSystem] = None
    ) -> None:
        """Moves multiple files to trash with error aggregation."""
        trash = trash or SystemTrash()
        cls._apply_all(file_paths, lambda p: cls.move_to_trash(p, trash=trash, fs=fs), "move to trash")

    @staticmethod
    def _apply_all(file_paths: List[str], action, verb: str) -> None:
        errors = []
        for path in file_paths:
            try:
                action(path)
            except (RuntimeError, ValueError) as e:
                errors.append((path, str(e)))

        if errors:
            error_summary = "\n".join(
                f"  • {Path(p).name}: {msg.split(':')[-1].strip()}"
                for p, msg in errors[:5]
            )
            if len(errors) > 5:
                error_summary += f"\n  • ...and {len(errors) - 5} more files"
            raise RuntimeError(
                f"Failed to {verb} {len(errors)} file(s):\n{error_summary}"
            )

    @staticmethod
    def _check_target(file_path: str, fs: FileSystem) -> bool:
        """
        Validates a delete/trash target.
        Returns False if it no longer exists; raises ValueError for an empty path or a directory.
        """
        if not file_path:
            raise ValueError("File path cannot be empty")

        try:
            st = fs.stat(file_path)
        except FileNotFoundError:
            logger.debug(f"Nothing to do, file not found: {file_path}")
            return False
        except OSError as e:
            raise RuntimeError(f"Cannot access {file_path}: {e}") from e

        if stat.S_ISDIR(st.st_mode):
            raise ValueError(f"Not a file: {file_path}")
        return True
