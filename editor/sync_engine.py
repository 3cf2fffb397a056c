"""Structural edits applied to every open resource and the namespace tree at once.

The engine is the only code that changes which keys exist. Each edit either
reaches all resources and the tree or none of them: preconditions are checked
before anything is touched, and the previous state is restored if an
unexpected error escapes half way.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional, Set

from .errors import SubtreeOverlapError, UnknownKeyError
from .key_path import KeyPath
from .namespace_tree import ConflictKind, NamespaceTree
from .resource_store import ResourceStore
from utils.logging_setup import get_logger

if TYPE_CHECKING:
    from .edit_session import EditSession

logger = get_logger("sync_engine")

# Decides whether a conflicting rename/duplicate may go ahead:
# (old key, new key, conflict kind) -> proceed?
ConflictResolver = Callable[[KeyPath, KeyPath, ConflictKind], bool]


def always_proceed(old_key: KeyPath, new_key: KeyPath, kind: ConflictKind) -> bool:
    return True


def always_abort(old_key: KeyPath, new_key: KeyPath, kind: ConflictKind) -> bool:
    return False


class SynchronizationEngine:

    def build_tree(self, resources: Iterable[ResourceStore]) -> NamespaceTree:
        """Build the namespace tree from the union of all resource keys.

        A key cannot hold a value and have children at once. When the loaded
        resources disagree on that (say "a" in one locale and "a.b" in
        another), the deeper keys win and the value at "a" is dropped from
        every resource.
        """
        resources = list(resources)
        keys: Dict[KeyPath, None] = {}
        for resource in resources:
            for key in resource.keys():
                keys.setdefault(key, None)
        tree = NamespaceTree.build(keys)
        for node in tree.iter_nodes():
            if node.is_key and not node.is_leaf:
                logger.warning(f"Dropping value of \"{node.path}\" because it has nested keys")
                for resource in resources:
                    resource.remove(node.path)
                node.is_key = False
        return tree

    def _collisions(self, session: 'EditSession', removed: Set[str], added: Iterable[KeyPath]) -> List[KeyPath]:
        """Keys that would hold a value and have children at once after an edit.

        Args:
            removed: Stored keys the edit drops
            added: Keys the edit stores
        """
        result = {str(key) for key in session.tree.keys()} - removed
        result.update(str(key) for key in added)
        prefixes: Set[str] = set()
        for key in result:
            segments = KeyPath.from_string(key).segments
            for depth in range(1, len(segments)):
                prefixes.add(KeyPath.SEPARATOR.join(segments[:depth]))
        return sorted(KeyPath.from_string(key) for key in result & prefixes)

    def _drop_values(self, session: 'EditSession', keys: List[KeyPath]):
        for key in keys:
            for resource in session.resources:
                resource.remove(key)
            node = session.tree.find(key)
            if node is not None:
                node.is_key = False

    @contextmanager
    def _atomic(self, session: 'EditSession'):
        resource_snapshots = [(resource, resource.snapshot()) for resource in session.resources]
        tree_snapshot = session.tree.copy()
        was_dirty = session.dirty
        try:
            yield
        except Exception:
            logger.error("Structural edit failed, restoring previous state", exc_info=True)
            for resource, snapshot in resource_snapshots:
                resource.restore(snapshot)
            session.tree = tree_snapshot
            session.set_dirty(was_dirty)
            raise

    def add_key(self, session: 'EditSession', key: KeyPath,
                confirm: Optional[ConflictResolver] = None) -> bool:
        """Add an empty translation for `key` to every resource.

        Adding a key below an existing translation turns that translation into
        a group, so its value is dropped once the resolver agrees.

        Returns:
            bool: False if there are no resources, the key already exists or
                the resolver declined
        """
        if not session.resources or session.tree.find(key) is not None:
            return False
        displaced = self._collisions(session, set(), [key])
        if displaced:
            resolver = confirm or session.conflict_resolver
            if not resolver(displaced[0], key, ConflictKind.REPLACE):
                logger.info(f"Declined to add {key} below existing key {displaced[0]}")
                return False
        with self._atomic(session):
            for resource in session.resources:
                resource.set(key, "")
            session.tree.insert(key)
            self._drop_values(session, displaced)
        logger.debug(f"Added key {key} to {len(session.resources)} resources")
        return True

    def remove_key(self, session: 'EditSession', key: KeyPath) -> bool:
        """Remove `key` and everything below it from every resource."""
        if not session.resources or session.tree.find(key) is None:
            return False
        with self._atomic(session):
            for resource in session.resources:
                resource.remove_subtree(key)
            session.tree.remove(key)
        logger.debug(f"Removed key {key} from {len(session.resources)} resources")
        return True

    def rename_key(self, session: 'EditSession', old_key: KeyPath, new_key: KeyPath,
                   confirm: Optional[ConflictResolver] = None) -> bool:
        """Rename the subtree at `old_key` to `new_key` in every resource.

        A REPLACE conflict is only applied after `confirm` (or the session's
        resolver) agrees; the destination subtree is then discarded first.
        A MERGE conflict goes ahead without asking unless it would leave a
        translation on a key that also has children.

        Returns:
            bool: True if the rename was applied
        """
        return self._relocate(session, old_key, new_key, confirm, keep_source=False)

    def duplicate_key(self, session: 'EditSession', old_key: KeyPath, new_key: KeyPath,
                      confirm: Optional[ConflictResolver] = None) -> bool:
        """Copy the subtree at `old_key` to `new_key` in every resource.

        Raises:
            SubtreeOverlapError: If the copy would remove or alter part of the source
        """
        return self._relocate(session, old_key, new_key, confirm, keep_source=True)

    def _relocate(self, session: 'EditSession', old_key: KeyPath, new_key: KeyPath,
                  confirm: Optional[ConflictResolver], keep_source: bool) -> bool:
        operation = "duplicate" if keep_source else "rename"
        if not session.resources or old_key == new_key:
            return False
        if session.tree.find(old_key) is None:
            raise UnknownKeyError(str(old_key))

        kind = session.tree.conflict_kind(old_key, new_key)
        replace = kind == ConflictKind.REPLACE

        stored = session.tree.keys()
        source_keys = {str(key) for key in stored if old_key.is_same_or_prefix_of(key)}
        removed = set() if keep_source else set(source_keys)
        if replace:
            removed.update(str(key) for key in stored if new_key.is_same_or_prefix_of(key))
        moved = [KeyPath.from_string(key).rebase(old_key, new_key) for key in source_keys]
        displaced = self._collisions(session, removed, moved)
        if keep_source and (source_keys & removed or source_keys & {str(key) for key in displaced}):
            raise SubtreeOverlapError(str(old_key), str(new_key))

        if replace or displaced:
            resolver = confirm or session.conflict_resolver
            if not resolver(old_key, new_key, ConflictKind.REPLACE):
                logger.info(f"Declined to {operation} {old_key} -> {new_key} over existing key")
                return False

        with self._atomic(session):
            for resource in session.resources:
                if keep_source:
                    resource.duplicate_subtree(old_key, new_key, replace=replace)
                else:
                    resource.rename_subtree(old_key, new_key, replace=replace)
            if keep_source:
                session.tree.duplicate(old_key, new_key, replace=replace)
            else:
                session.tree.rename(old_key, new_key, replace=replace)
            self._drop_values(session, displaced)
        logger.debug(f"Applied {operation} {old_key} -> {new_key} ({kind.name}, {len(displaced)} values dropped)")
        return True

    def store_translation(self, session: 'EditSession', locale: str, key: KeyPath, value: str) -> bool:
        """Set the value of an existing leaf key for one locale.

        Raises:
            UnknownKeyError: If the key is not in the tree or the locale is not open
        """
        node = session.tree.find(key)
        resource = session.get_resource(locale)
        if node is None:
            raise UnknownKeyError(str(key))
        if resource is None:
            raise UnknownKeyError(f"{locale}:{key}")
        if not node.is_leaf:
            logger.warning(f"Ignoring value for group key {key}")
            return False
        if resource.get(key) == value:
            return False
        resource.set(key, value)
        return True

    def is_consistent(self, session: 'EditSession') -> bool:
        """Check that the tree is exactly the hierarchy of the stored keys."""
        stored: Set[str] = set()
        for resource in session.resources:
            stored.update(resource.translations.keys())
        prefixes: Set[str] = set()
        for key in stored:
            segments = KeyPath.from_string(key).segments
            for depth in range(1, len(segments) + 1):
                prefixes.add(KeyPath.SEPARATOR.join(segments[:depth]))

        tree = session.tree
        tree_paths = {str(path) for path in tree.paths()}
        tree_keys = {str(path) for path in tree.keys()}
        tree_leaves = {str(path) for path in tree.leaves()}
        return tree_paths == prefixes and tree_keys == stored and tree_leaves == stored
