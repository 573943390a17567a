"""Unit tests for TreePath."""

import pytest

from laakhay.prune.core import InvalidPathError, TreePath


class TestTreePathParse:
    """Test parsing slash-delimited strings."""

    @pytest.mark.parametrize("raw", ["", "/", "//"])
    def test_root_forms(self, raw):
        path = TreePath.parse(raw)
        assert path.is_root
        assert str(path) == "/"
        assert path.parent is None
        assert path.name is None

    def test_nested_path(self):
        path = TreePath.parse("/users/alice/posts/")
        assert path.segments == ("users", "alice", "posts")
        assert str(path) == "/users/alice/posts"
        assert path.name == "posts"
        assert path.depth == 3

    def test_parse_is_idempotent_for_tree_path(self):
        path = TreePath.parse("/a/b")
        assert TreePath.parse(path) is path

    def test_parse_rejects_non_string(self):
        with pytest.raises(InvalidPathError):
            TreePath.parse(42)  # type: ignore[arg-type]


class TestTreePathNavigation:
    """Test child/parent relationships."""

    def test_child_and_parent_round_trip(self):
        parent = TreePath.parse("/a")
        child = parent.child("b")
        assert str(child) == "/a/b"
        assert child.parent == parent

    def test_child_of_root(self):
        assert str(TreePath().child("1")) == "/1"

    @pytest.mark.parametrize("key", ["", "a/b"])
    def test_child_rejects_invalid_keys(self, key):
        with pytest.raises(InvalidPathError):
            TreePath.parse("/a").child(key)

    def test_is_ancestor_of(self):
        a = TreePath.parse("/a")
        assert a.is_ancestor_of(TreePath.parse("/a/b/c"))
        assert not a.is_ancestor_of(a)
        assert not a.is_ancestor_of(TreePath.parse("/ab"))
        assert TreePath().is_ancestor_of(a)


def test_sibling_ordering_is_lexicographic():
    """Sibling paths sort by key string, not numerically."""
    root = TreePath()
    siblings = [root.child(k) for k in ["10", "2", "1", "b", "a"]]
    assert [p.name for p in sorted(siblings)] == ["1", "10", "2", "a", "b"]


def test_paths_are_hashable():
    assert len({TreePath.parse("/a/b"), TreePath.parse("a/b/"), TreePath.parse("/a")}) == 2
