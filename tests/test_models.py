"""
Tests for data models and parameter validation.
"""
import pytest

from twinsweep.core.models import (
    File, FileHashes, DuplicateFile, DuplicateGroup, DeduplicationParams,
    DeduplicationStats, DeduplicationConfig, Stage
)


class TestFile:
    def test_name_derived_from_path(self):
        assert File("/photos/cat.jpg", 10).name == "cat.jpg"

    def test_hashes_start_empty(self):
        file = File("/a", 1)
        assert file.hashes.prefix is None
        assert file.hashes.full is None

    def test_hashes_must_be_bytes(self):
        with pytest.raises(ValueError):
            FileHashes(prefix="not bytes")


class TestDuplicateGroup:
    def test_derived_values(self):
        group = DuplicateGroup(
            hash="0" * 64,
            file_size=100,
            files=[DuplicateFile.from_path("/a/x"), DuplicateFile.from_path("/b/x"), DuplicateFile.from_path("/c/x")]
        )
        assert group.duplicate_count == 3
        assert group.total_wasted == 200
        assert group.paths == ["/a/x", "/b/x", "/c/x"]
        assert group.files[0].name == "x"

    def test_needs_two_files(self):
        with pytest.raises(ValueError):
            DuplicateGroup(hash="0" * 64, file_size=1, files=[DuplicateFile.from_path("/a")])

    def test_rejects_negative_size(self):
        with pytest.raises(ValueError):
            DuplicateGroup(hash="0" * 64, file_size=-1,
                           files=[DuplicateFile.from_path("/a"), DuplicateFile.from_path("/b")])

    def test_is_immutable(self):
        group = DuplicateGroup(hash="0" * 64, file_size=1,
                               files=[DuplicateFile.from_path("/a"), DuplicateFile.from_path("/b")])
        with pytest.raises(AttributeError):
            group.file_size = 2


class TestDeduplicationParams:
    def test_defaults(self):
        params = DeduplicationParams(root_dir="/data")
        assert params.min_size_bytes == 0
        assert params.workers is None

    @pytest.mark.parametrize("kwargs", [
        {"root_dir": ""},
        {"root_dir": "/data", "min_size_bytes": -1},
        {"root_dir": "/data", "workers": 0},
    ])
    def test_validation(self, kwargs):
        with pytest.raises(ValueError):
            DeduplicationParams(**kwargs)

    def test_from_human_readable(self):
        params = DeduplicationParams.from_human_readable("/data", "1MB", workers=2)
        assert params.min_size_bytes == 1024 ** 2
        assert params.workers == 2


class TestStatsAndConfig:
    def test_constants(self):
        assert DeduplicationConfig.PREFIX_SIZE == 8192
        assert DeduplicationConfig.READ_CHUNK_SIZE == 65536
        assert 1 <= DeduplicationConfig.default_workers() <= 32

    def test_listener_receives_updates(self):
        stats = DeduplicationStats()
        events = []
        stats.add_listener(lambda name, data: events.append((name, data["groups"])))

        stats.update_stage("size", groups_found=3, files_processed=7, duration=0.1)
        stats.update_stage("size", groups_found=1, files_processed=2, duration=0.1)

        assert events == [("size", 3), ("size", 4)]
        assert stats.stage_stats["size"]["files"] == 9

    def test_failing_listener_does_not_break_updates(self):
        stats = DeduplicationStats()

        def broken(name, data):
            raise RuntimeError("listener bug")

        stats.add_listener(broken)
        stats.update_stage("full", groups_found=1, files_processed=2, duration=0.0)
        assert stats.stage_stats["full"]["groups"] == 1

    def test_summary_labels(self):
        stats = DeduplicationStats()
        stats.update_stage("prefix", 2, 4, 0.0)
        stats.record_hashed("prefix", 6)
        summary = stats.print_summary()
        assert "Prefix Hash Groups: 2 / 4" in summary
        assert "Files hashed: prefix=6" in summary

    def test_stage_display_names(self):
        assert [s.display_name for s in Stage.get_all()] == [
            "Size grouping", "Prefix Hash", "Full Hash", "Group assembly"]
