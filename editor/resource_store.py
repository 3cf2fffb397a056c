import os
from typing import Callable, Dict, List, Optional

from babel import Locale, UnknownLocaleError

from . import resource_codecs
from .errors import InvalidKeyError, ResourceReadError, ResourceWriteError
from .key_path import KeyPath, is_in_subtree
from .resource_codecs import ResourceType
from utils.logging_setup import get_logger

logger = get_logger("resource_store")


class ResourceStore:
    """The translations of one locale, held as an ordered flat mapping.

    Keys are stored as dotted strings; the hierarchy is only ever derived by
    the namespace tree. Key validation is the caller's job. Every change to the
    mapping marks the store dirty and notifies registered listeners.

    Attributes:
        locale: Locale code (e.g. 'en', 'pt_BR')
        path: Location of the backing resource file
        type: Format of the backing resource file
        translations: Ordered mapping of dotted key to translated string
        dirty: Whether the mapping changed since the last load or save
    """

    def __init__(self, locale: str, path: str, resource_type: ResourceType,
                 translations: Optional[Dict[str, str]] = None):
        self.locale = locale
        self.path = path
        self.type = resource_type
        self.translations: Dict[str, str] = dict(translations) if translations else {}
        self.dirty = False
        self._listeners: List[Callable[['ResourceStore'], None]] = []

    @classmethod
    def create(cls, resource_type: ResourceType, directory: str, locale: str) -> 'ResourceStore':
        """Create the file for a new locale and return an empty store for it.

        Raises:
            ResourceWriteError: If the file cannot be created
        """
        try:
            path = resource_codecs.create_resource_file(resource_type, directory, locale)
        except resource_codecs.CODEC_ERRORS as e:
            raise ResourceWriteError(f"Unable to create resource for locale {locale}: {e}",
                                     path=directory, locale=locale) from e
        return cls(locale, path, resource_type)

    @property
    def display_name(self) -> str:
        """Human readable locale name, falling back to the raw code."""
        try:
            return Locale.parse(self.locale.replace("-", "_")).get_display_name() or self.locale
        except (UnknownLocaleError, ValueError):
            return self.locale

    def add_listener(self, listener: Callable[['ResourceStore'], None]):
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[['ResourceStore'], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self):
        self.dirty = True
        for listener in self._listeners:
            listener(self)

    def get(self, key: KeyPath) -> Optional[str]:
        return self.translations.get(str(key))

    def has_key(self, key: KeyPath) -> bool:
        return str(key) in self.translations

    def keys(self) -> List[KeyPath]:
        return [KeyPath.from_string(key) for key in self.translations]

    def set(self, key: KeyPath, value: str):
        self.translations[str(key)] = value
        self._changed()

    def remove(self, key: KeyPath) -> bool:
        if self.translations.pop(str(key), None) is None:
            return False
        self._changed()
        return True

    def _subtree_keys(self, prefix: KeyPath) -> List[str]:
        prefix_str = str(prefix)
        return [key for key in self.translations if is_in_subtree(key, prefix_str)]

    def remove_subtree(self, prefix: KeyPath) -> int:
        """Remove the entry at `prefix` and every entry below it.

        Returns:
            int: Number of entries removed
        """
        keys = self._subtree_keys(prefix)
        for key in keys:
            del self.translations[key]
        if keys:
            self._changed()
        return len(keys)

    def rename_subtree(self, old_prefix: KeyPath, new_prefix: KeyPath, replace: bool = False):
        """Move every entry at or below `old_prefix` under `new_prefix`.

        Args:
            old_prefix: Root of the entries to move
            new_prefix: Root the entries are moved to
            replace: Drop the entries already at or below `new_prefix` first
        """
        self._relocate_subtree(old_prefix, new_prefix, keep_source=False, replace=replace)

    def duplicate_subtree(self, old_prefix: KeyPath, new_prefix: KeyPath, replace: bool = False):
        """Copy every entry at or below `old_prefix` under `new_prefix`."""
        self._relocate_subtree(old_prefix, new_prefix, keep_source=True, replace=replace)

    def _relocate_subtree(self, old_prefix: KeyPath, new_prefix: KeyPath, keep_source: bool, replace: bool):
        moved = {}
        for key in self._subtree_keys(old_prefix):
            new_key = KeyPath.from_string(key).rebase(old_prefix, new_prefix)
            moved[str(new_key)] = self.translations[key]
        if not keep_source:
            for key in self._subtree_keys(old_prefix):
                del self.translations[key]
        if replace:
            for key in self._subtree_keys(new_prefix):
                del self.translations[key]
        self.translations.update(moved)
        if moved or replace:
            self._changed()

    def snapshot(self):
        return dict(self.translations), self.dirty

    def restore(self, snapshot):
        translations, dirty = snapshot
        self.translations = dict(translations)
        self.dirty = dirty

    def load(self):
        """Read the backing file, replacing the current mapping.

        Raises:
            ResourceReadError: If the file is missing, unreadable or malformed
        """
        try:
            translations = resource_codecs.read_resource(self.type, self.path, self.locale)
            for key in translations:
                KeyPath.from_string(key)
        except resource_codecs.CODEC_ERRORS + (InvalidKeyError,) as e:
            raise ResourceReadError(f"Unable to read resource {self.path}: {e}",
                                    path=self.path, locale=self.locale) from e
        self.translations = translations
        self.dirty = False
        logger.debug(f"Loaded {len(translations)} translations for locale {self.locale} from {self.path}")

    def save(self, minify: bool = False):
        """Write the mapping to the backing file.

        Raises:
            ResourceWriteError: If the file cannot be written
        """
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            resource_codecs.write_resource(self.type, self.path, self.locale, self.translations, minify)
        except resource_codecs.CODEC_ERRORS as e:
            raise ResourceWriteError(f"Unable to write resource {self.path}: {e}",
                                     path=self.path, locale=self.locale) from e
        self.dirty = False
        logger.debug(f"Saved {len(self.translations)} translations for locale {self.locale} to {self.path}")

    def __lt__(self, other):
        return self.locale < other.locale

    def __repr__(self):
        return f"ResourceStore(locale={self.locale!r}, type={self.type.name}, entries={len(self.translations)})"
