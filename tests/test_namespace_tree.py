"""
Unit tests for NamespaceTree.
"""

import pytest

from editor.errors import SamePathError, UnknownKeyError
from editor.key_path import KeyPath
from editor.namespace_tree import ConflictKind, NamespaceTree


def k(key):
    return KeyPath.parse(key)


def build(*keys):
    return NamespaceTree.build(k(key) for key in keys)


def paths(tree):
    return sorted(str(path) for path in tree.paths())


class TestTreeBuilding:
    """Tests for building and inserting keys."""

    def test_build_creates_intermediate_groups(self):
        tree = build("a.b.c", "a.d")
        assert paths(tree) == ["a", "a.b", "a.b.c", "a.d"]
        assert tree.find(k("a")).is_leaf is False
        assert tree.find(k("a.b.c")).is_leaf is True
        assert [str(path) for path in tree.keys()] == ["a.b.c", "a.d"]

    def test_sibling_order_follows_insertion(self):
        tree = build("b", "a", "c")
        assert [child.name for child in tree.root.children] == ["b", "a", "c"]

    def test_insert_is_idempotent(self):
        tree = build("a.b")
        node = tree.find(k("a.b"))
        assert tree.insert(k("a.b")) is node
        assert tree.insert(k("a")) is tree.find(k("a"))
        assert len(tree) == 2

    def test_iter_nodes_is_pre_order(self):
        tree = build("a.b", "a.c", "d")
        assert [str(node.path) for node in tree.iter_nodes()] == ["a", "a.b", "a.c", "d"]


class TestTreeRemoval:
    """Tests for removing subtrees and pruning."""

    def test_remove_prunes_empty_ancestors(self):
        tree = build("a.b.c", "x")
        assert tree.remove(k("a.b.c")) is True
        assert paths(tree) == ["x"]

    def test_remove_keeps_stored_ancestor(self):
        """An ancestor holding its own value becomes a leaf again."""
        tree = build("a", "a.b")
        tree.remove(k("a.b"))
        assert paths(tree) == ["a"]
        assert tree.find(k("a")).is_leaf

    def test_remove_whole_subtree(self):
        tree = build("a.b.c", "a.b.d", "a.e")
        tree.remove(k("a.b"))
        assert paths(tree) == ["a", "a.e"]

    def test_remove_missing_returns_false(self):
        tree = build("a")
        assert tree.remove(k("b")) is False
        assert paths(tree) == ["a"]


class TestTreeConflicts:
    """Tests for conflict classification."""

    def test_no_conflict_when_target_missing(self):
        tree = build("a.b")
        assert tree.conflict_kind(k("a.b"), k("c")) == ConflictKind.NONE

    def test_replace_when_either_side_is_leaf(self):
        tree = build("a.b", "c", "d.e")
        assert tree.conflict_kind(k("a.b"), k("c")) == ConflictKind.REPLACE
        assert tree.conflict_kind(k("a"), k("c")) == ConflictKind.REPLACE
        assert tree.conflict_kind(k("c"), k("d")) == ConflictKind.REPLACE

    def test_merge_when_both_are_groups(self):
        tree = build("a.b", "d.e")
        assert tree.conflict_kind(k("a"), k("d")) == ConflictKind.MERGE

    def test_unknown_source_raises(self):
        tree = build("a")
        with pytest.raises(UnknownKeyError):
            tree.conflict_kind(k("missing"), k("a"))


class TestTreeRelocation:
    """Tests for rename and duplicate."""

    def test_rename_moves_subtree(self):
        tree = build("a.b.c", "a.b.d", "x")
        tree.rename(k("a.b"), k("y.z"))
        assert paths(tree) == ["x", "y", "y.z", "y.z.c", "y.z.d"]

    def test_duplicate_keeps_source(self):
        tree = build("a.b")
        tree.duplicate(k("a"), k("c"))
        assert paths(tree) == ["a", "a.b", "c", "c.b"]

    def test_rename_merge(self):
        tree = build("a.x", "b.y")
        tree.rename(k("a"), k("b"))
        assert paths(tree) == ["b", "b.x", "b.y"]

    def test_rename_replace_drops_target(self):
        tree = build("a.x", "b.y")
        tree.rename(k("a.x"), k("b"), replace=True)
        assert paths(tree) == ["b"]
        assert tree.find(k("b")).is_leaf

    def test_rename_into_own_descendant(self):
        tree = build("a.b")
        tree.rename(k("a"), k("a.c"))
        assert paths(tree) == ["a", "a.c", "a.c.b"]

    def test_rename_onto_ancestor(self):
        tree = build("a.b.c")
        tree.rename(k("a.b"), k("a"), replace=True)
        assert paths(tree) == ["a", "a.c"]

    def test_rename_same_path_raises(self):
        tree = build("a")
        with pytest.raises(SamePathError):
            tree.rename(k("a"), k("a"))

    def test_rename_missing_source_raises(self):
        tree = build("a")
        with pytest.raises(UnknownKeyError):
            tree.rename(k("b"), k("c"))

    def test_copy_is_independent(self):
        tree = build("a.b")
        copy = tree.copy()
        copy.remove(k("a"))
        assert paths(tree) == ["a", "a.b"]
        assert paths(copy) == []
