"""
Unit tests for KeyPath.
"""

import pytest

from editor.errors import InvalidKeyError, NoParentError
from editor.key_path import KeyPath, is_in_subtree


class TestKeyPathParsing:
    """Tests for building keys from strings."""

    @pytest.mark.parametrize("key", ["a", "menu.file.open", "page_1.item-2", "A.b_C"])
    def test_parse_accepts_valid_keys(self, key):
        assert str(KeyPath.parse(key)) == key
        assert KeyPath.is_valid(key)

    @pytest.mark.parametrize("key", ["", ".a", "a.", "a..b", "a b", "a.b!", "a.b\n"])
    def test_parse_rejects_invalid_keys(self, key):
        with pytest.raises(InvalidKeyError):
            KeyPath.parse(key)
        assert not KeyPath.is_valid(key)

    def test_parse_reports_reason(self):
        with pytest.raises(InvalidKeyError) as exc_info:
            KeyPath.parse("a..b")
        assert exc_info.value.reason == "empty segment"

        with pytest.raises(InvalidKeyError) as exc_info:
            KeyPath.parse("a.b c")
        assert exc_info.value.reason == "illegal characters"

    def test_from_string_allows_stored_characters(self):
        """Stored keys may contain characters a user could not type."""
        key = KeyPath.from_string("errors.Not found!")
        assert key.segments == ("errors", "Not found!")

    def test_from_string_rejects_empty_segments(self):
        with pytest.raises(InvalidKeyError):
            KeyPath.from_string("a..b")
        with pytest.raises(InvalidKeyError):
            KeyPath.from_string("")

    def test_constructor_rejects_plain_string(self):
        with pytest.raises(TypeError):
            KeyPath("a.b")


class TestKeyPathStructure:
    """Tests for parent, child and prefix relations."""

    def test_parent_and_depth(self):
        key = KeyPath.parse("a.b.c")
        assert key.depth == 3
        assert key.last_segment == "c"
        assert key.parent == KeyPath.parse("a.b")
        assert key.has_parent()

    def test_top_level_key_has_no_parent(self):
        key = KeyPath.parse("a")
        assert not key.has_parent()
        with pytest.raises(NoParentError):
            key.parent

    def test_child_validates_segment(self):
        assert KeyPath.parse("a").child("b") == KeyPath.parse("a.b")
        with pytest.raises(InvalidKeyError):
            KeyPath.parse("a").child("b.c")

    def test_prefix_relations(self):
        a = KeyPath.parse("a")
        ab = KeyPath.parse("a.b")
        abc = KeyPath.parse("abc")
        assert a.is_prefix_of(ab)
        assert not a.is_prefix_of(a)
        assert a.is_same_or_prefix_of(a)
        assert not a.is_prefix_of(abc)
        assert ab.common_prefix_length(KeyPath.parse("a.c")) == 1

    def test_rebase(self):
        key = KeyPath.parse("a.b.c")
        assert key.rebase(KeyPath.parse("a.b"), KeyPath.parse("x")) == KeyPath.parse("x.c")
        with pytest.raises(ValueError):
            key.rebase(KeyPath.parse("z"), KeyPath.parse("x"))

    def test_ordering_and_hashing(self):
        keys = [KeyPath.parse(k) for k in ["b", "a.b", "a"]]
        assert [str(k) for k in sorted(keys)] == ["a", "a.b", "b"]
        assert len({KeyPath.parse("a.b"), KeyPath.parse("a.b")}) == 1

    def test_is_in_subtree(self):
        assert is_in_subtree("a.b", "a")
        assert is_in_subtree("a", "a")
        assert not is_in_subtree("ab", "a")
