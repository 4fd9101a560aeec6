"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements file hashing using the File class and pluggable hash algorithms.

HasherImpl computes two digests per file, both cached in the File's hashes container:
- prefix: digest of at most the first 8 KiB (exactly the bytes read)
- full: digest of the whole content, streamed in 64 KiB chunks
Read errors propagate as OSError; callers decide whether to drop the file.
"""

import hashlib
from typing import Optional

from twinsweep.core.models import File, DeduplicationConfig
from twinsweep.core.interfaces import Hasher, HashAlgorithm, DigestState, FileSystem
from twinsweep.core.filesystem import LocalFileSystem


# Use the same way to implement and use any other hashing algorithm
class Sha256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self) -> DigestState:
        return hashlib.sha256()


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Computes and caches prefix and full digests of a file.
    """

    def __init__(
        self,
        algorithm: Optional[HashAlgorithm] = None,
        fs: Optional[FileSystem] = None,
        prefix_size: int = DeduplicationConfig.PREFIX_SIZE,
        chunk_size: int = DeduplicationConfig.READ_CHUNK_SIZE
    ):
        self.algorithm = algorithm or Sha256AlgorithmImpl()
        self.fs = fs or LocalFileSystem()
        self.prefix_size = prefix_size
        self.chunk_size = chunk_size

    def compute_prefix_hash(self, file: File) -> bytes:
        """Computes and caches the digest of the first prefix_size bytes of a file."""
        if file.hashes.prefix is not None:
            return file.hashes.prefix

        digest = self.algorithm.new()
        with self.fs.open_read(file.path) as f:
            digest.update(f.read(self.prefix_size))

        result = digest.digest()
        file.hashes.prefix = result
        return result

    def compute_full_hash(self, file: File) -> bytes:
        """Computes and caches the digest of the entire file, one chunk at a time."""
        if file.hashes.full is not None:
            return file.hashes.full

        digest = self.algorithm.new()
        with self.fs.open_read(file.path) as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                digest.update(chunk)

        result = digest.digest()
        file.hashes.full = result
        return result
