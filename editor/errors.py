"""Exception types raised by the translation key editor core."""


class EditorError(Exception):
    """Base class for all editor errors."""
    pass


class InvalidKeyError(EditorError):
    """Raised when a key string does not satisfy the key grammar."""

    def __init__(self, key, reason=None):
        self.key = key
        self.reason = reason
        message = f"Invalid translation key: \"{key}\""
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class NoParentError(EditorError):
    """Raised when asking a single-segment key for its parent."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Translation key \"{key}\" has no parent")


class SamePathError(EditorError):
    """Raised when a structural move or copy targets its own source."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Source and destination are the same key: \"{key}\"")


class UnknownKeyError(EditorError):
    """Raised when an operation refers to a key that is not in the tree."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Translation key not found: \"{key}\"")


class InvalidLocaleError(EditorError):
    """Raised when a locale cannot be added to the session."""

    def __init__(self, locale, reason=None):
        self.locale = locale
        message = f"Invalid locale: \"{locale}\""
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class ResourceError(EditorError):
    """Base class for resource I/O failures.

    Attributes:
        path: Location of the resource file
        locale: Locale of the resource, if known
    """

    def __init__(self, message, path=None, locale=None):
        super().__init__(message)
        self.path = path
        self.locale = locale


class ResourceReadError(ResourceError):
    """Raised when a resource file is unreadable or malformed."""
    pass


class ResourceWriteError(ResourceError):
    """Raised when a resource file cannot be written."""
    pass


class SubtreeOverlapError(EditorError):
    """Raised when copying a subtree would overwrite part of the source itself."""

    def __init__(self, old_key, new_key):
        self.old_key = old_key
        self.new_key = new_key
        super().__init__(f"Cannot copy \"{old_key}\" to \"{new_key}\" without changing the source")
