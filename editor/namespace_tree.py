"""Hierarchical view over the flat keys of every open resource.

The tree is stored as an arena of nodes indexed by their dotted path. Each node
also keeps its children in first-seen order so the tree can be walked without
sorting. Nodes carry no translation values, only structural position and
whether their path is a key stored directly in at least one resource.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import SamePathError, UnknownKeyError
from .key_path import KeyPath
from utils.logging_setup import get_logger

logger = get_logger("namespace_tree")


class ConflictKind(Enum):
    """Outcome of moving or copying a subtree onto an existing node."""
    NONE = "none"
    MERGE = "merge"
    REPLACE = "replace"


class TreeNode:
    def __init__(self, path: Optional[KeyPath], is_key: bool = False):
        self.path = path
        self.is_key = is_key
        self._children: Dict[str, 'TreeNode'] = {}

    @property
    def is_root(self) -> bool:
        return self.path is None

    @property
    def is_leaf(self) -> bool:
        return len(self._children) == 0

    @property
    def name(self) -> str:
        return "" if self.path is None else self.path.last_segment

    @property
    def children(self) -> Tuple['TreeNode', ...]:
        return tuple(self._children.values())

    def get_child(self, segment: str) -> Optional['TreeNode']:
        return self._children.get(segment)

    def __repr__(self):
        return f"TreeNode({str(self.path) if self.path else '<root>'!r}, leaf={self.is_leaf}, key={self.is_key})"


class NamespaceTree:
    def __init__(self):
        self.root = TreeNode(None)
        self._nodes: Dict[str, TreeNode] = {}

    @classmethod
    def build(cls, keys: Iterable[KeyPath]) -> 'NamespaceTree':
        """Build a tree from scratch out of a collection of stored keys.

        Sibling order follows the order in which keys are first seen.
        """
        tree = cls()
        for key in keys:
            tree._insert(key, is_key=True)
        logger.debug(f"Built namespace tree with {len(tree._nodes)} nodes")
        return tree

    def find(self, path: KeyPath) -> Optional[TreeNode]:
        return self._nodes.get(str(path))

    def __contains__(self, path: KeyPath) -> bool:
        return str(path) in self._nodes

    def __len__(self):
        return len(self._nodes)

    def insert(self, path: KeyPath) -> TreeNode:
        """Insert a stored key, creating any missing ancestors.

        Inserting a path that already exists, as a leaf or as a group, is a no-op.
        """
        existing = self.find(path)
        if existing is not None:
            return existing
        return self._insert(path, is_key=True)

    def _insert(self, path: KeyPath, is_key: bool) -> TreeNode:
        parent = self.root
        node = None
        for depth in range(1, path.depth + 1):
            segment = path.segments[depth - 1]
            node = parent._children.get(segment)
            if node is None:
                node = TreeNode(KeyPath(path.segments[:depth]))
                parent._children[segment] = node
                self._nodes[str(node.path)] = node
            parent = node
        if is_key:
            node.is_key = True
        return node

    def remove(self, path: KeyPath) -> bool:
        """Remove the node at `path` with its whole subtree.

        Ancestors left without children are pruned unless they are stored keys,
        in which case they simply become leaves again.

        Returns:
            bool: True if a node was removed
        """
        node = self.find(path)
        if node is None:
            return False
        for descendant in list(self._iter_subtree(node)):
            del self._nodes[str(descendant.path)]
        parent = self._parent_of(path)
        del parent._children[path.last_segment]
        self._prune(parent)
        return True

    def _prune(self, node: TreeNode):
        while not node.is_root and node.is_leaf and not node.is_key:
            parent = self._parent_of(node.path)
            del parent._children[node.name]
            del self._nodes[str(node.path)]
            node = parent

    def _parent_of(self, path: KeyPath) -> TreeNode:
        if not path.has_parent():
            return self.root
        return self._nodes[str(path.parent)]

    def conflict_kind(self, old_path: KeyPath, new_path: KeyPath) -> ConflictKind:
        """Classify what moving or copying `old_path` onto `new_path` would do.

        Returns:
            ConflictKind: NONE when nothing exists at `new_path`, REPLACE when
                either side is a leaf (a value would be lost), MERGE when both
                sides are groups
        """
        new_node = self.find(new_path)
        if new_node is None:
            return ConflictKind.NONE
        old_node = self.find(old_path)
        if old_node is None:
            raise UnknownKeyError(str(old_path))
        if new_node.is_leaf or old_node.is_leaf:
            return ConflictKind.REPLACE
        return ConflictKind.MERGE

    def rename(self, old_path: KeyPath, new_path: KeyPath, replace: bool = False):
        """Move the subtree at `old_path` so that it is rooted at `new_path`.

        Any conflict must be resolved by the caller beforehand. With `replace`
        the subtree already at `new_path` is dropped first, otherwise the moved
        subtree is merged into it.
        """
        self._relocate(old_path, new_path, keep_source=False, replace=replace)

    def duplicate(self, old_path: KeyPath, new_path: KeyPath, replace: bool = False):
        """Copy the subtree at `old_path` to `new_path`, keeping the source."""
        self._relocate(old_path, new_path, keep_source=True, replace=replace)

    def _relocate(self, old_path: KeyPath, new_path: KeyPath, keep_source: bool, replace: bool):
        if old_path == new_path:
            raise SamePathError(str(old_path))
        source = self.find(old_path)
        if source is None:
            raise UnknownKeyError(str(old_path))

        # Snapshot first: the destination may sit inside the source or above it
        shape = [(node.path.relative_to(old_path), node.is_key) for node in self._iter_subtree(source)]
        if not keep_source:
            self.remove(old_path)
        if replace:
            self.remove(new_path)
        for relative, is_key in shape:
            self._insert(new_path.join(relative), is_key=is_key)
        logger.debug(f"{'Duplicated' if keep_source else 'Renamed'} subtree {old_path} -> {new_path} "
                     f"({len(shape)} nodes, replace={replace})")

    def _iter_subtree(self, node: TreeNode) -> Iterator[TreeNode]:
        stack = [node]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Lazily walk every node (root excluded) in pre-order."""
        for child in self.root.children:
            yield from self._iter_subtree(child)

    def keys(self) -> List[KeyPath]:
        """Paths of all nodes flagged as stored keys."""
        return [node.path for node in self.iter_nodes() if node.is_key]

    def paths(self) -> List[KeyPath]:
        return [node.path for node in self.iter_nodes()]

    def leaves(self) -> List[KeyPath]:
        return [node.path for node in self.iter_nodes() if node.is_leaf]

    def clear(self):
        self.root = TreeNode(None)
        self._nodes = {}

    def copy(self) -> 'NamespaceTree':
        tree = NamespaceTree()
        for node in self.iter_nodes():
            tree._insert(node.path, is_key=node.is_key)
        return tree
