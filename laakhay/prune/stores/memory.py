"""In-memory tree store.

Holds the tree as a tagged variant of ``Leaf(size)`` and
``Internal(children)`` nodes and reproduces the remote store's observable
behavior: filter-then-limit listing, write size limits on delete, and
deterministic timeouts decided from the configured latency.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from ..core.base import TreeStore
from ..core.exceptions import PayloadTooLargeError, PermissionDeniedError, StoreTimeoutError
from ..core.path import TreePath


@dataclass(frozen=True)
class Leaf:
    """Scalar value; ``size`` is its contribution to a delete payload."""

    size: int = 1

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError("Leaf size must be >= 0")


@dataclass(frozen=True)
class Internal:
    """Mapping from child key to node."""

    children: dict[str, Node] = field(default_factory=dict)


Node = Union[Leaf, Internal]


def tree(shape: Mapping[str, object] | int) -> Node:
    """Build a node from nested mappings whose leaves are integer sizes.

    Examples:
        >>> tree({"1": 1, "2": {"a": 3}})
        Internal(children={'1': Leaf(size=1), '2': Internal(children={'a': Leaf(size=3)})})
    """
    if isinstance(shape, bool) or not isinstance(shape, (int, Mapping)):
        raise TypeError(f"Tree shape must be an int size or a mapping, got {type(shape).__name__}")
    if isinstance(shape, int):
        return Leaf(shape)
    return Internal({str(key): tree(value) for key, value in shape.items()})  # type: ignore[arg-type]


def subtree_size(node: Node) -> int:
    """Total payload size of a node, computed without recursion."""
    total = 0
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Leaf):
            total += current.size
        else:
            stack.extend(current.children.values())
    return total


def copy_tree(node: Node) -> Node:
    """Deep copy of ``node`` in which every Internal is a distinct object.

    Shared subtrees in the input become independent copies. Leaves are
    immutable and reused.
    """
    if isinstance(node, Leaf):
        return node
    replica = Internal({})
    stack: list[tuple[Internal, Internal]] = [(node, replica)]
    while stack:
        source, target = stack.pop()
        for key, child in source.children.items():
            if isinstance(child, Leaf):
                target.children[key] = child
            else:
                child_copy = Internal({})
                target.children[key] = child_copy
                stack.append((child, child_copy))
    return replica


@dataclass(frozen=True)
class InMemoryStoreConfig:
    """Immutable behavior settings for InMemoryTreeStore.

    Attributes:
        latency: Simulated round-trip time per call (seconds)
        write_size_limit: Largest subtree size a single delete may remove (None = unlimited)
        denied_paths: Paths (and their subtrees) the caller may not touch
    """

    latency: float = 0.0
    write_size_limit: int | None = None
    denied_paths: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if self.latency < 0:
            raise ValueError("latency must be >= 0")
        if self.write_size_limit is not None and self.write_size_limit <= 0:
            raise ValueError("write_size_limit must be positive")


class InMemoryTreeStore(TreeStore):
    """TreeStore backed by a local node tree.

    Counts calls and tracks peak concurrent calls so tests can assert on the
    orchestrator's traffic.
    """

    def __init__(self, root: Node | Mapping[str, object], config: InMemoryStoreConfig | None = None) -> None:
        super().__init__("memory")
        # Deletes mutate children in place, so the store never shares nodes with the caller.
        self._root: Node = copy_tree(root) if isinstance(root, (Leaf, Internal)) else tree(root)
        self._config = config or InMemoryStoreConfig()
        self._denied = tuple(TreePath.parse(p) for p in self._config.denied_paths)
        self.list_calls: list[tuple[str, int, str | None]] = []
        self.delete_calls: list[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    @property
    def config(self) -> InMemoryStoreConfig:
        return self._config

    @property
    def root(self) -> Node:
        return self._root

    def node_at(self, path: str | TreePath) -> Node | None:
        """Node stored at ``path``, or None if absent."""
        node: Node | None = self._root
        for segment in TreePath.parse(path).segments:
            if not isinstance(node, Internal):
                return None
            node = node.children.get(segment)
        return node

    def exists(self, path: str | TreePath) -> bool:
        return self.node_at(path) is not None

    def size_of(self, path: str | TreePath) -> int:
        node = self.node_at(path)
        return 0 if node is None else subtree_size(node)

    async def list_path(
        self,
        path: str,
        num_children: int,
        start_after: str | None = None,
        timeout: float | None = None,
    ) -> list[str]:
        if num_children <= 0:
            raise ValueError("num_children must be positive")
        self.list_calls.append((path, num_children, start_after))
        async with self._call(timeout, path):
            target = TreePath.parse(path)
            self._check_permission(target)
            node = self.node_at(target)
            if not isinstance(node, Internal):
                return []
            keys = sorted(node.children)
            # startAfter is applied before the limit; swapping them breaks resumption.
            if start_after is not None:
                keys = [key for key in keys if key > start_after]
            return keys[:num_children]

    async def delete_subtree(self, path: str, timeout: float | None = None) -> None:
        self.delete_calls.append(path)
        async with self._call(timeout, path):
            target = TreePath.parse(path)
            self._check_permission(target)
            node = self.node_at(target)
            if node is None:
                return
            limit = self._config.write_size_limit
            if limit is not None and subtree_size(node) > limit:
                raise PayloadTooLargeError(
                    f"Data to write exceeds the maximum size for {path}", path=path
                )
            self._remove(target)

    def _remove(self, target: TreePath) -> None:
        if target.is_root:
            self._root = Internal({})
            return
        parent = self.node_at(target.parent)  # type: ignore[arg-type]
        if isinstance(parent, Internal):
            parent.children.pop(target.name, None)  # type: ignore[arg-type]

    def _check_permission(self, target: TreePath) -> None:
        for denied in self._denied:
            if denied == target or denied.is_ancestor_of(target):
                raise PermissionDeniedError(f"Permission denied for {target}", path=str(target), status_code=401)

    def _call(self, timeout: float | None, path: str) -> _SimulatedCall:
        return _SimulatedCall(self, timeout, path)


class _SimulatedCall:
    """Tracks concurrency and applies simulated latency to one store call.

    When the configured latency reaches the deadline the call sleeps only
    until the deadline and then fails, so outcomes never depend on timer races.
    """

    def __init__(self, store: InMemoryTreeStore, timeout: float | None, path: str) -> None:
        self._store = store
        self._timeout = timeout
        self._path = path

    async def __aenter__(self) -> None:
        store = self._store
        store.in_flight += 1
        store.peak_in_flight = max(store.peak_in_flight, store.in_flight)
        latency = store.config.latency
        try:
            if self._timeout is not None and latency >= self._timeout:
                await asyncio.sleep(self._timeout)
                raise StoreTimeoutError(
                    f"Request for {self._path} timed out after {self._timeout}s", path=self._path
                )
            # Always yield so concurrent callers actually overlap.
            await asyncio.sleep(latency)
        except BaseException:
            store.in_flight -= 1
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self._store.in_flight -= 1
