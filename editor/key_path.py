import re
from functools import total_ordering
from typing import Iterable, Tuple

from .errors import InvalidKeyError, NoParentError


@total_ordering
class KeyPath:
    """An immutable, dot-separated translation key such as "menu.file.open".

    Keys typed in by a user must go through `KeyPath.parse`, which enforces the
    full grammar. The plain constructor is lenient and only rejects empty
    segments, so keys read from existing resource files stay representable
    even when they contain characters a user could not enter.
    """
    SEPARATOR = "."
    SEGMENT_PATTERN = re.compile(r"[\w-]+")
    KEY_PATTERN = re.compile(r"[\w-]+(\.[\w-]+)*")

    __slots__ = ("_segments",)

    def __init__(self, segments: Iterable[str]):
        if isinstance(segments, str):
            raise TypeError("Use KeyPath.parse() or KeyPath.from_string() for string keys")
        segments = tuple(segments)
        if not segments:
            raise InvalidKeyError("", "key is empty")
        for segment in segments:
            if not segment or KeyPath.SEPARATOR in segment:
                raise InvalidKeyError(KeyPath.SEPARATOR.join(segments), "empty segment")
        self._segments = segments

    @classmethod
    def parse(cls, key: str) -> 'KeyPath':
        """Parse a user-supplied key, enforcing the key grammar.

        Args:
            key: Dot-separated key string

        Returns:
            KeyPath: The parsed key

        Raises:
            InvalidKeyError: If the key is empty, has an empty segment or
                contains characters outside the allowed set
        """
        if key is None or key == "":
            raise InvalidKeyError("" if key is None else key, "key is empty")
        if not cls.KEY_PATTERN.fullmatch(key):
            if any(segment == "" for segment in key.split(cls.SEPARATOR)):
                raise InvalidKeyError(key, "empty segment")
            raise InvalidKeyError(key, "illegal characters")
        return cls(key.split(cls.SEPARATOR))

    @classmethod
    def from_string(cls, key: str) -> 'KeyPath':
        """Build a key from a stored key string without the character check."""
        if not key:
            raise InvalidKeyError(key or "", "key is empty")
        return cls(key.split(cls.SEPARATOR))

    @classmethod
    def is_valid(cls, key: str) -> bool:
        try:
            cls.parse(key)
            return True
        except InvalidKeyError:
            return False

    @property
    def segments(self) -> Tuple[str, ...]:
        return self._segments

    @property
    def depth(self) -> int:
        return len(self._segments)

    @property
    def last_segment(self) -> str:
        return self._segments[-1]

    @property
    def parent(self) -> 'KeyPath':
        if len(self._segments) == 1:
            raise NoParentError(str(self))
        return KeyPath(self._segments[:-1])

    def has_parent(self) -> bool:
        return len(self._segments) > 1

    def child(self, segment: str) -> 'KeyPath':
        """Return the key one level below this one.

        Raises:
            InvalidKeyError: If the segment is not a valid single segment
        """
        if not segment or not KeyPath.SEGMENT_PATTERN.fullmatch(segment):
            raise InvalidKeyError(f"{self}{KeyPath.SEPARATOR}{segment}", "invalid segment")
        return KeyPath(self._segments + (segment,))

    def join(self, relative: Iterable[str]) -> 'KeyPath':
        """Append already validated relative segments."""
        return KeyPath(self._segments + tuple(relative))

    def is_prefix_of(self, other: 'KeyPath') -> bool:
        """True if this key is a proper ancestor of `other`."""
        return (len(other._segments) > len(self._segments)
                and other._segments[:len(self._segments)] == self._segments)

    def is_same_or_prefix_of(self, other: 'KeyPath') -> bool:
        return self == other or self.is_prefix_of(other)

    def common_prefix_length(self, other: 'KeyPath') -> int:
        length = 0
        for mine, theirs in zip(self._segments, other._segments):
            if mine != theirs:
                break
            length += 1
        return length

    def relative_to(self, ancestor: 'KeyPath') -> Tuple[str, ...]:
        """Segments of this key below `ancestor` (empty when equal)."""
        if not ancestor.is_same_or_prefix_of(self):
            raise ValueError(f"\"{ancestor}\" is not an ancestor of \"{self}\"")
        return self._segments[len(ancestor._segments):]

    def rebase(self, old_prefix: 'KeyPath', new_prefix: 'KeyPath') -> 'KeyPath':
        """Substitute `old_prefix` with `new_prefix` at the start of this key."""
        return new_prefix.join(self.relative_to(old_prefix))

    def __str__(self):
        return KeyPath.SEPARATOR.join(self._segments)

    def __repr__(self):
        return f"KeyPath({str(self)!r})"

    def __eq__(self, other):
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._segments == other._segments

    def __lt__(self, other):
        if not isinstance(other, KeyPath):
            return NotImplemented
        return self._segments < other._segments

    def __hash__(self):
        return hash(self._segments)

    def __len__(self):
        return len(self._segments)


def is_in_subtree(key: str, prefix: str) -> bool:
    """Check a stored key string against a subtree root without parsing."""
    return key == prefix or key.startswith(prefix + KeyPath.SEPARATOR)
