"""
Tests for DuplicateService bookkeeping on scan results.
"""
from twinsweep.core.models import DuplicateGroup, DuplicateFile
from twinsweep.services.duplicate_service import DuplicateService


def group(hash_char, size, *paths):
    return DuplicateGroup(hash=hash_char * 64, file_size=size, files=[DuplicateFile.from_path(p) for p in paths])


class TestRemoveFilesFromGroups:
    def test_drops_groups_left_with_one_file(self):
        groups = [group("a", 10, "/a1", "/a2"), group("b", 5, "/b1", "/b2", "/b3")]

        updated = DuplicateService.remove_files_from_groups(groups, ["/a2", "/b3"])

        assert len(updated) == 1
        assert updated[0].paths == ["/b1", "/b2"]
        assert updated[0].hash == "b" * 64

    def test_does_not_mutate_input(self):
        original = group("a", 10, "/a1", "/a2", "/a3")
        DuplicateService.remove_files_from_groups([original], ["/a3"])
        assert original.paths == ["/a1", "/a2", "/a3"]

    def test_untouched_groups_are_kept_as_is(self):
        original = group("a", 10, "/a1", "/a2")
        assert DuplicateService.remove_files_from_groups([original], ["/other"])[0] is original


class TestKeepOnlyOne:
    def test_marks_all_but_first(self):
        groups = [group("a", 10, "/a1", "/a2", "/a3"), group("b", 5, "/b1", "/b2")]

        to_delete, updated = DuplicateService.keep_only_one_file_per_group(groups)

        assert to_delete == ["/a2", "/a3", "/b2"]
        assert updated == []

    def test_total_wasted(self):
        groups = [group("a", 10, "/a1", "/a2", "/a3"), group("b", 5, "/b1", "/b2")]
        assert DuplicateService.total_wasted(groups) == 25
        assert DuplicateService.total_wasted([]) == 0
