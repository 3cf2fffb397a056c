import os
import re
from typing import Callable, Dict, Iterator, List, Optional

from .errors import InvalidLocaleError, ResourceReadError, ResourceWriteError
from .key_path import KeyPath
from .namespace_tree import NamespaceTree, TreeNode
from .resource_codecs import ResourceType, find_resources, resource_path
from .resource_store import ResourceStore
from .session_results import SessionAction, SessionResults
from .sync_engine import ConflictResolver, SynchronizationEngine, always_abort
from utils.logging_setup import get_logger

logger = get_logger("edit_session")


class EditSession:
    """The set of locale resources opened from one directory and their tree.

    All structural edits made by the application go through this class, which
    hands them to the synchronization engine so that every resource and the
    tree change together.
    """
    LOCALE_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

    def __init__(self, conflict_resolver: ConflictResolver = always_abort, minify_output: bool = False,
                 engine: Optional[SynchronizationEngine] = None):
        self.engine = engine or SynchronizationEngine()
        self.conflict_resolver = conflict_resolver
        self.minify_output = minify_output
        self.resources_dir: Optional[str] = None
        self.resources: List[ResourceStore] = []
        self.tree = NamespaceTree()
        self.dirty = False
        self._dirty_listeners: List[Callable[[bool], None]] = []

    @property
    def locales(self) -> List[str]:
        return [resource.locale for resource in self.resources]

    @property
    def is_open(self) -> bool:
        return self.resources_dir is not None

    def add_dirty_listener(self, listener: Callable[[bool], None]):
        self._dirty_listeners.append(listener)

    def set_dirty(self, dirty: bool):
        changed = self.dirty != dirty
        self.dirty = dirty
        if changed:
            for listener in self._dirty_listeners:
                listener(dirty)

    def _on_resource_changed(self, resource: ResourceStore):
        self.set_dirty(True)

    def _setup_resource(self, resource: ResourceStore):
        resource.add_listener(self._on_resource_changed)
        self.resources.append(resource)

    def get_resource(self, locale: str) -> Optional[ResourceStore]:
        for resource in self.resources:
            if resource.locale == locale:
                return resource
        return None

    def import_resources(self, directory: str, action: SessionAction = SessionAction.IMPORT) -> SessionResults:
        """Open every resource found directly inside `directory`.

        A resource that fails to load is skipped and reported; the remaining
        resources are still opened and the tree is built from their keys.

        Args:
            directory: Directory holding one resource per locale

        Returns:
            SessionResults: Loaded and failed locales for this import
        """
        results = SessionResults.create(directory, action)
        if not directory or not os.path.isdir(directory):
            logger.warning(f"Cannot import resources, not a directory: {directory}")
            results.action_successful = False
            results.extend_error_message(f"Not a directory: {directory}")
            return results

        self.reset()
        self.resources_dir = directory
        try:
            found = find_resources(directory)
        except OSError as e:
            logger.error(f"Error scanning resources directory {directory}: {e}")
            results.action_successful = False
            results.extend_error_message(f"Unable to read directory {directory}: {e}")
            return results

        for locale, resource_type, path in found:
            resource = ResourceStore(locale, path, resource_type)
            try:
                resource.load()
            except ResourceReadError as e:
                logger.warning(f"Skipping resource for locale {locale}: {e}")
                results.record_failure(e)
                continue
            self._setup_resource(resource)
            results.loaded_locales.append(locale)

        self.tree = self.engine.build_tree(self.resources)
        results.total_keys = len(self.tree.keys())
        results.determine_action_successful()
        logger.info(f"Imported {len(self.resources)} resources ({results.total_keys} keys) from {directory}")
        return results

    def reload_resources(self) -> SessionResults:
        return self.import_resources(self.resources_dir, SessionAction.RELOAD)

    def save_resources(self) -> SessionResults:
        """Write every resource back to disk.

        Every resource is attempted even after a failure. The session stays
        dirty unless all of them were written.
        """
        results = SessionResults.create(self.resources_dir, SessionAction.SAVE)
        for resource in self.resources:
            try:
                resource.save(self.minify_output)
                results.saved_locales.append(resource.locale)
            except ResourceWriteError as e:
                logger.error(f"Failed to save resource for locale {resource.locale}: {e}")
                results.record_failure(e)
        results.determine_action_successful()
        self.set_dirty(not results.action_successful)
        return results

    def reset(self):
        """Drop all resources and the tree, keeping the directory."""
        for resource in self.resources:
            resource.remove_listener(self._on_resource_changed)
        self.resources = []
        self.tree = NamespaceTree()
        self.set_dirty(False)

    def close(self):
        self.reset()
        self.resources_dir = None

    def add_locale(self, locale: str, resource_type: ResourceType) -> ResourceStore:
        """Create a resource file for a new locale and open it.

        Raises:
            InvalidLocaleError: If the locale is empty, malformed or already present
            ResourceWriteError: If the resource file cannot be created
        """
        locale = (locale or "").strip()
        if not self.resources_dir:
            raise InvalidLocaleError(locale, "no resources directory is open")
        if not locale or not EditSession.LOCALE_PATTERN.fullmatch(locale):
            raise InvalidLocaleError(locale, "locale must be a non-empty code like 'en' or 'pt_BR'")
        if self.get_resource(locale) is not None:
            raise InvalidLocaleError(locale, "locale already exists")
        path = resource_path(resource_type, self.resources_dir, locale)
        if os.path.exists(path) or os.path.isdir(os.path.join(self.resources_dir, locale)):
            raise InvalidLocaleError(locale, f"{path} already exists")

        resource = ResourceStore.create(resource_type, self.resources_dir, locale)
        self._setup_resource(resource)
        logger.info(f"Added locale {locale} ({resource_type.display_name})")
        return resource

    def remove_locale(self, locale: str) -> bool:
        """Close the resource for `locale` and rebuild the tree without it.

        The resource file itself is left on disk.
        """
        resource = self.get_resource(locale)
        if resource is None:
            return False
        resource.remove_listener(self._on_resource_changed)
        self.resources.remove(resource)
        self.tree = self.engine.build_tree(self.resources)
        logger.info(f"Removed locale {locale} from session")
        return True

    def add_key(self, key: KeyPath, confirm: Optional[ConflictResolver] = None) -> bool:
        return self.engine.add_key(self, key, confirm)

    def remove_key(self, key: KeyPath) -> bool:
        return self.engine.remove_key(self, key)

    def rename_key(self, old_key: KeyPath, new_key: KeyPath, confirm: Optional[ConflictResolver] = None) -> bool:
        return self.engine.rename_key(self, old_key, new_key, confirm)

    def duplicate_key(self, old_key: KeyPath, new_key: KeyPath, confirm: Optional[ConflictResolver] = None) -> bool:
        return self.engine.duplicate_key(self, old_key, new_key, confirm)

    def store_translation(self, locale: str, key: KeyPath, value: str) -> bool:
        return self.engine.store_translation(self, locale, key, value)

    def find_node(self, key: KeyPath) -> Optional[TreeNode]:
        return self.tree.find(key)

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Lazily walk the live tree nodes in pre-order.

        Nodes are not copies; a node whose key is later removed or renamed
        must not be used anymore.
        """
        return self.tree.iter_nodes()

    def get_translations(self, key: KeyPath) -> Dict[str, Optional[str]]:
        return {resource.locale: resource.get(key) for resource in self.resources}

    def is_consistent(self) -> bool:
        return self.engine.is_consistent(self)
