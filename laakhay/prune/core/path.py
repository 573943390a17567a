"""Tree path value object.

A path is an ordered sequence of key segments printed as a slash-delimited
string. The root is the empty sequence and prints as ``/``.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import InvalidPathError

SEPARATOR = "/"


@dataclass(frozen=True, order=True)
class TreePath:
    """Immutable, hashable path into the remote tree.

    Ordering compares segment tuples, so sibling paths sort
    lexicographically by their last key.

    Examples:
        >>> TreePath.parse("/users/alice").child("posts")
        TreePath('/users/alice/posts')
        >>> str(TreePath.parse("/"))
        '/'
    """

    segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for segment in self.segments:
            validate_key(segment)

    @classmethod
    def parse(cls, raw: str | TreePath) -> TreePath:
        """Parse a slash-delimited string.

        Leading, trailing and repeated separators are ignored, so ``""``,
        ``"/"`` and ``"//"`` all denote the root.
        """
        if isinstance(raw, TreePath):
            return raw
        if not isinstance(raw, str):
            raise InvalidPathError(f"Path must be a string, got {type(raw).__name__}")
        return cls(tuple(part for part in raw.split(SEPARATOR) if part))

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def name(self) -> str | None:
        """Last segment, or None for the root."""
        return self.segments[-1] if self.segments else None

    @property
    def parent(self) -> TreePath | None:
        if self.is_root:
            return None
        return TreePath(self.segments[:-1])

    @property
    def depth(self) -> int:
        return len(self.segments)

    def child(self, key: str) -> TreePath:
        """Return the path of a direct child."""
        validate_key(key)
        return TreePath((*self.segments, key))

    def is_ancestor_of(self, other: TreePath) -> bool:
        """True if ``other`` lies strictly below this path."""
        return (
            len(other.segments) > len(self.segments)
            and other.segments[: len(self.segments)] == self.segments
        )

    def __str__(self) -> str:
        return SEPARATOR + SEPARATOR.join(self.segments)

    def __repr__(self) -> str:
        return f"TreePath({str(self)!r})"


def validate_key(key: str) -> str:
    """Validate a single key segment.

    Raises:
        InvalidPathError: If the key is empty, not a string, or contains a separator
    """
    if not isinstance(key, str) or not key:
        raise InvalidPathError(f"Invalid path segment: {key!r}")
    if SEPARATOR in key:
        raise InvalidPathError(f"Path segment must not contain '{SEPARATOR}': {key!r}")
    return key
