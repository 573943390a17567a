"""Tree store backends."""

from .memory import (
    InMemoryStoreConfig,
    InMemoryTreeStore,
    Internal,
    Leaf,
    Node,
    copy_tree,
    subtree_size,
    tree,
)
from .rest import RestStoreSettings, RestTreeStore

__all__ = [
    "InMemoryTreeStore",
    "InMemoryStoreConfig",
    "Leaf",
    "Internal",
    "Node",
    "tree",
    "subtree_size",
    "copy_tree",
    "RestTreeStore",
    "RestStoreSettings",
]
