"""
Unit tests for HasherImpl.
Checks digests against known SHA-256 values, the prefix read limit,
chunked streaming and digest caching.
"""
import hashlib

import pytest

from twinsweep.core.hasher import HasherImpl, Sha256AlgorithmImpl
from twinsweep.core.models import File, DeduplicationConfig

CONTENT_SHA256 = "ed7002b439e9ac845f22357d822bac1444730fbdb6016d3ec9432297b9ec9f73"


class RecordingReader:
    """File-like object that records the size of every read request."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0
        self.requests = []

    def read(self, size=-1):
        self.requests.append(size)
        if size < 0:
            size = len(self.data) - self.pos
        chunk = self.data[self.pos:self.pos + size]
        self.pos += len(chunk)
        return chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestSha256Algorithm:
    def test_name_and_digest_size(self):
        algorithm = Sha256AlgorithmImpl()
        assert algorithm.name == "sha256"
        state = algorithm.new()
        state.update(b"content")
        assert len(state.digest()) == 32

    def test_new_returns_fresh_state(self):
        algorithm = Sha256AlgorithmImpl()
        first = algorithm.new()
        first.update(b"abc")
        assert algorithm.new().digest() == hashlib.sha256().digest()


class TestHasherImpl:
    """Digests of real files on disk."""

    def test_full_hash_of_known_content(self, temp_dir):
        path = temp_dir / "known.txt"
        path.write_bytes(b"content")

        digest = HasherImpl().compute_full_hash(File(str(path), 7))
        assert digest.hex() == CONTENT_SHA256

    def test_prefix_hash_of_small_file_equals_full_hash(self, temp_dir):
        """Below 8 KiB the prefix covers the whole content."""
        path = temp_dir / "known.txt"
        path.write_bytes(b"content")

        hasher = HasherImpl()
        assert hasher.compute_prefix_hash(File(str(path), 7)).hex() == CONTENT_SHA256

    def test_prefix_hash_covers_only_first_8_kib(self, temp_dir):
        """Files differing after byte 8192 share a prefix digest but not a full digest."""
        head = b"x" * DeduplicationConfig.PREFIX_SIZE
        a = temp_dir / "a.bin"
        b = temp_dir / "b.bin"
        a.write_bytes(head + b"tail-one")
        b.write_bytes(head + b"tail-two")

        hasher = HasherImpl()
        file_a = File(str(a), a.stat().st_size)
        file_b = File(str(b), b.stat().st_size)

        assert hasher.compute_prefix_hash(file_a) == hashlib.sha256(head).digest()
        assert hasher.compute_prefix_hash(file_a) == hasher.compute_prefix_hash(file_b)
        assert hasher.compute_full_hash(file_a) != hasher.compute_full_hash(file_b)

    def test_full_hash_of_large_file_matches_hashlib(self, temp_dir):
        data = bytes(range(256)) * 1000  # spans several 64 KiB chunks
        path = temp_dir / "large.bin"
        path.write_bytes(data)

        digest = HasherImpl().compute_full_hash(File(str(path), len(data)))
        assert digest == hashlib.sha256(data).digest()

    def test_missing_file_raises_os_error(self, temp_dir):
        with pytest.raises(OSError):
            HasherImpl().compute_full_hash(File(str(temp_dir / "gone.bin"), 10))


class TestHasherReads:
    """Read patterns observed through the FileSystem seam."""

    def test_prefix_hash_requests_prefix_size_once(self, fake_fs):
        fake_fs.add_file("/d/big.bin", b"z" * 100_000)
        reader = RecordingReader(fake_fs.files["/d/big.bin"])
        fake_fs.open_read = lambda path: reader

        HasherImpl(fs=fake_fs).compute_prefix_hash(File("/d/big.bin", 100_000))

        assert reader.requests == [DeduplicationConfig.PREFIX_SIZE]
        assert reader.pos == DeduplicationConfig.PREFIX_SIZE

    def test_full_hash_streams_in_chunks(self, fake_fs):
        data = b"q" * (DeduplicationConfig.READ_CHUNK_SIZE * 2 + 10)
        fake_fs.add_file("/d/big.bin", data)
        reader = RecordingReader(data)
        fake_fs.open_read = lambda path: reader

        digest = HasherImpl(fs=fake_fs).compute_full_hash(File("/d/big.bin", len(data)))

        assert digest == hashlib.sha256(data).digest()
        assert set(reader.requests) == {DeduplicationConfig.READ_CHUNK_SIZE}
        # two full chunks, a partial one, then the empty read that ends the loop
        assert len(reader.requests) == 4

    def test_digests_are_cached_on_the_file(self, fake_fs):
        fake_fs.add_file("/d/a.txt", b"content")
        file = File("/d/a.txt", 7)
        hasher = HasherImpl(fs=fake_fs)

        first_prefix = hasher.compute_prefix_hash(file)
        first_full = hasher.compute_full_hash(file)
        hasher.compute_prefix_hash(file)
        hasher.compute_full_hash(file)

        assert fake_fs.opened == ["/d/a.txt", "/d/a.txt"]
        assert file.hashes.prefix == first_prefix
        assert file.hashes.full == first_full

    def test_failure_mid_stream_propagates(self, fake_fs):
        fake_fs.add_file("/d/flaky.bin", b"data")
        fake_fs.failing_midstream.add("/d/flaky.bin")
        file = File("/d/flaky.bin", 4)

        with pytest.raises(OSError):
            HasherImpl(fs=fake_fs).compute_full_hash(file)
        assert file.hashes.full is None

    def test_custom_sizes(self, fake_fs):
        fake_fs.add_file("/d/a.txt", b"abcdef")
        hasher = HasherImpl(fs=fake_fs, prefix_size=3, chunk_size=2)

        assert hasher.compute_prefix_hash(File("/d/a.txt", 6)) == hashlib.sha256(b"abc").digest()
        assert hasher.compute_full_hash(File("/d/a.txt", 6)) == hashlib.sha256(b"abcdef").digest()
