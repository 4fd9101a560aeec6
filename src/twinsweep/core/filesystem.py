"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filesystem.py
Local disk implementation of the FileSystem protocol.
"""

import os
import shutil
from typing import List, BinaryIO

from twinsweep.core.interfaces import FileSystem


class LocalFileSystem(FileSystem):
    """Thin wrapper over `os`; every call may raise OSError."""

    def list_dir(self, path: str) -> List[str]:
        return os.listdir(path)

    def stat(self, path: str, follow_symlinks: bool = False) -> os.stat_result:
        return os.stat(path, follow_symlinks=follow_symlinks)

    def open_read(self, path: str) -> BinaryIO:
        return open(path, 'rb')

    def create_new(self, path: str) -> None:
        # O_EXCL fails if the name exists, even when another process races us
        os.close(os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600))

    def rename(self, src: str, dst: str) -> None:
        # shutil.move falls back to copy + unlink across devices
        shutil.move(src, dst)

    def remove(self, path: str) -> None:
        os.remove(path)
