"""Unit tests for cfahub.content.folders."""

import pytest

from cfahub.content.folders import FolderPathResolver, ancestor_chain, build_paths, would_create_cycle

ROOT = "No folder"


def chain(depth):
    """f1 <- f2 <- ... <- f{depth}, named n1..n{depth}"""
    folders = {}
    for i in range(1, depth + 1):
        folders[f"f{i}"] = {"id": f"f{i}", "name": f"n{i}", "parent_id": f"f{i - 1}" if i > 1 else None}
    return folders


class TestBuildPaths:
    @pytest.mark.parametrize("depth", [1, 2, 3, 7])
    def test_segment_count_equals_chain_depth(self, depth):
        paths = build_paths([f"f{depth}"], chain(depth), ROOT)
        segments = paths[f"f{depth}"].split(" / ")
        assert segments == [f"n{i}" for i in range(1, depth + 1)]

    def test_folder_without_parent_is_just_its_name(self):
        assert build_paths(["f1"], chain(1), ROOT) == {"f1": "n1"}

    def test_dangling_reference_maps_to_root_label(self):
        assert build_paths(["gone"], chain(2), ROOT) == {"gone": ROOT}

    def test_missing_ancestor_keeps_known_part(self):
        folders = {"f2": {"id": "f2", "name": "child", "parent_id": "gone"}}
        assert build_paths(["f2"], folders, ROOT) == {"f2": "child"}

    def test_empty_input(self):
        assert build_paths([], chain(3), ROOT) == {}

    def test_custom_separator(self):
        assert build_paths(["f2"], chain(2), ROOT, separator=" > ") == {"f2": "n1 > n2"}


class TestCycleSafety:
    def test_cycle_is_truncated_not_looped(self):
        folders = {
            "a": {"id": "a", "name": "A", "parent_id": "b"},
            "b": {"id": "b", "name": "B", "parent_id": "a"},
        }
        assert ancestor_chain("a", folders, max_depth=64) == ["B", "A"]

    def test_depth_cap(self):
        names = ancestor_chain("f100", chain(100), max_depth=64)
        assert len(names) == 64
        assert names[-1] == "n100"

    def test_move_under_own_descendant_is_a_cycle(self):
        folders = chain(3)
        assert would_create_cycle("f1", "f3", folders, 64)

    def test_move_under_itself_is_a_cycle(self):
        assert would_create_cycle("f1", "f1", chain(1), 64)

    def test_move_to_root_or_sibling_is_fine(self):
        folders = chain(2)
        folders["x"] = {"id": "x", "name": "X", "parent_id": None}
        assert not would_create_cycle("f2", None, folders, 64)
        assert not would_create_cycle("f2", "x", folders, 64)


class TestFolderPathResolver:
    def test_fetches_one_level_per_round(self, fake_db):
        fake_db.seed("library_folders", *chain(3).values())
        paths = FolderPathResolver(fake_db).resolve_paths(["f3"], ROOT)
        assert paths == {"f3": "n1 / n2 / n3"}
        reads = [c for c in fake_db.calls if c[1] == "library_folders"]
        assert len(reads) == 3

    def test_no_ids_no_query(self, fake_db):
        assert FolderPathResolver(fake_db).resolve_paths([None, ""], ROOT) == {}
        assert fake_db.calls == []

    def test_backend_failure_degrades_to_root_label(self, fake_db):
        fake_db.fail_on.add(("select", "library_folders"))
        assert FolderPathResolver(fake_db).resolve_paths(["f1"], ROOT) == {"f1": ROOT}

    def test_cycle_in_table_terminates(self, fake_db):
        fake_db.seed(
            "library_folders",
            {"id": "a", "name": "A", "parent_id": "b"},
            {"id": "b", "name": "B", "parent_id": "a"},
        )
        assert FolderPathResolver(fake_db, max_depth=8).resolve_paths(["a"], ROOT) == {"a": "B / A"}
