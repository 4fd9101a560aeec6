"""
Shared fixtures for duplicate detection tests.
Creates isolated temporary directories with controlled test files,
plus an in-memory filesystem and a call-counting hasher.
"""
import io
import os
import stat
import threading
from types import SimpleNamespace
from pathlib import Path
from typing import Dict, List

import pytest

from twinsweep.core.hasher import HasherImpl
from twinsweep.core.models import File


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Isolated temporary directory, removed by pytest after the test."""
    return tmp_path


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate scenarios:
    - 3 copies of 1KB of 'A' (one in a subdirectory)
    - 2 copies of 2KB of 'B'
    - 2 files of 1500 bytes with different content (eliminated by the prefix hash)
    - 1 unique-size file
    - 1 empty file (filtered by the walker)
    - 1 hidden duplicate of 'A' (filtered by the walker)
    """
    files = {}

    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.bin"
    files["dup2_b"] = temp_dir / "dup2_b.bin"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    files["same_size_1"] = temp_dir / "same_size_1.txt"
    files["same_size_1"].write_bytes(b"C" * 1500)
    files["same_size_2"] = temp_dir / "same_size_2.txt"
    files["same_size_2"].write_bytes(b"D" * 1500)

    files["unique"] = temp_dir / "unique.txt"
    files["unique"].write_bytes(b"E" * 2500)

    files["empty"] = temp_dir / "empty.txt"
    files["empty"].write_bytes(b"")

    files["hidden"] = temp_dir / ".hidden_copy.txt"
    files["hidden"].write_bytes(content_a)

    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


class FailingReader(io.BytesIO):
    """Returns the first chunk, then fails like a disk error mid-stream."""

    def __init__(self, data: bytes, fail_after: int = 1):
        super().__init__(data)
        self.reads = 0
        self.fail_after = fail_after

    def read(self, size=-1):
        self.reads += 1
        if self.reads > self.fail_after:
            raise OSError("I/O error")
        return super().read(size)


class FakeFileSystem:
    """
    In-memory FileSystem: regular files, directories and symbolic links.
    Paths are absolute POSIX strings.
    """

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.dirs = {"/"}
        self.links: Dict[str, str] = {}
        self.unreadable = set()
        self.failing_midstream = set()
        self.undeletable = set()
        self.opened: List[str] = []

    def add_file(self, path: str, content: bytes) -> str:
        self._add_parents(path)
        self.files[path] = content
        return path

    def add_dir(self, path: str) -> str:
        self._add_parents(path)
        self.dirs.add(path)
        return path

    def add_link(self, path: str, target: str) -> str:
        self._add_parents(path)
        self.links[path] = target
        return path

    def _add_parents(self, path: str) -> None:
        parent = os.path.dirname(path)
        while parent not in self.dirs:
            self.dirs.add(parent)
            parent = os.path.dirname(parent)

    # FileSystem protocol

    def list_dir(self, path: str) -> List[str]:
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        if path not in self.dirs:
            raise FileNotFoundError(path)
        entries = set(self.files) | self.dirs | set(self.links)
        return [os.path.basename(p) for p in entries if p != path and os.path.dirname(p) == path]

    def stat(self, path: str, follow_symlinks: bool = False):
        if follow_symlinks and path in self.links:
            return self.stat(self.links[path], follow_symlinks=True)
        if path in self.links:
            return SimpleNamespace(st_mode=stat.S_IFLNK | 0o777, st_size=len(self.links[path]))
        if path in self.dirs:
            return SimpleNamespace(st_mode=stat.S_IFDIR | 0o755, st_size=4096)
        if path in self.files:
            return SimpleNamespace(st_mode=stat.S_IFREG | 0o644, st_size=len(self.files[path]))
        raise FileNotFoundError(path)

    def open_read(self, path: str):
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        if path not in self.files:
            raise FileNotFoundError(path)
        self.opened.append(path)
        if path in self.failing_midstream:
            return FailingReader(self.files[path])
        return io.BytesIO(self.files[path])

    def create_new(self, path: str) -> None:
        if path in self.files or path in self.dirs or path in self.links:
            raise FileExistsError(path)
        self._add_parents(path)
        self.files[path] = b""

    def rename(self, src: str, dst: str) -> None:
        if src not in self.files:
            raise FileNotFoundError(src)
        self._add_parents(dst)
        self.files[dst] = self.files.pop(src)

    def remove(self, path: str) -> None:
        if path in self.undeletable:
            raise PermissionError(f"Operation not permitted: {path}")
        if path not in self.files:
            raise FileNotFoundError(path)
        del self.files[path]


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem()


class CountingHasher(HasherImpl):
    """HasherImpl that records which files were actually read, per digest kind."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.prefix_calls: List[str] = []
        self.full_calls: List[str] = []
        self._lock = threading.Lock()

    def compute_prefix_hash(self, file: File) -> bytes:
        with self._lock:
            self.prefix_calls.append(file.path)
        return super().compute_prefix_hash(file)

    def compute_full_hash(self, file: File) -> bytes:
        with self._lock:
            self.full_calls.append(file.path)
        return super().compute_full_hash(file)


@pytest.fixture
def counting_hasher():
    """Factory: counting_hasher(fs=None) -> CountingHasher."""
    return lambda fs=None: CountingHasher(fs=fs)
