"""
Core duplicate detection engine: walker, hasher, grouper, stages and assembler.

This package contains the performance-critical foundation of twinsweep:
- FileScannerImpl: lazy recursive directory walk with hidden/symlink/size filters
- HasherImpl + Sha256AlgorithmImpl: SHA-256 prefix and streamed full-content digests
- FileGrouperImpl: size and digest bucketing on a bounded thread pool
- DeduplicatorImpl: multi-stage pipeline (size → prefix hash → full hash → assembly)
- GroupAssemblerImpl: DuplicateGroup records ordered by wasted bytes
- Models: File, DuplicateGroup and configuration objects

All components are pure Python with no UI dependencies.
"""

from .models import (
    File, FileHashes, CandidateGroup, DuplicateFile, DuplicateGroup,
    DeduplicationConfig, DeduplicationParams, DeduplicationStats, Stage)
from .filesystem import LocalFileSystem
from .scanner import FileScannerImpl
from .hasher import HasherImpl, Sha256AlgorithmImpl
from .grouper import FileGrouperImpl
from .assembler import GroupAssemblerImpl
from .deduplicator import DeduplicatorImpl

__all__ = [
    "File",
    "FileHashes",
    "CandidateGroup",
    "DuplicateFile",
    "DuplicateGroup",
    "DeduplicationConfig",
    "DeduplicationParams",
    "DeduplicationStats",
    "Stage",
    "LocalFileSystem",
    "FileScannerImpl",
    "HasherImpl",
    "Sha256AlgorithmImpl",
    "FileGrouperImpl",
    "GroupAssemblerImpl",
    "DeduplicatorImpl",
]
