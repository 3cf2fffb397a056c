from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Dict, List, Optional

from .errors import ResourceError


class SessionAction(Enum):
    IMPORT = auto()
    RELOAD = auto()
    SAVE = auto()


@dataclass
class SessionResults:
    """Outcome of a batch resource operation (import, reload or save).

    Batch operations keep going when a single resource fails, so a result can
    report both loaded and failed locales at once.
    """
    resources_dir: Optional[str]
    action: SessionAction
    action_timestamp: datetime
    action_successful: bool = True
    error_message: Optional[str] = None
    loaded_locales: List[str] = field(default_factory=list)
    saved_locales: List[str] = field(default_factory=list)
    failed_locales: List[str] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    total_keys: int = 0

    @classmethod
    def create(cls, resources_dir: Optional[str], action: SessionAction) -> 'SessionResults':
        return cls(resources_dir=resources_dir, action=action, action_timestamp=datetime.now())

    def record_failure(self, error: ResourceError):
        """Record a per-resource failure without aborting the batch."""
        name = error.locale or str(error.path)
        self.failed_locales.append(name)
        self.failures[str(error.path)] = str(error)
        self.extend_error_message(str(error))

    def extend_error_message(self, message: str):
        """Extend the error message with a new message."""
        if self.error_message:
            self.error_message += "\n" + message
        else:
            self.error_message = message

    def determine_action_successful(self):
        """Determine if the action was successful based on the results."""
        self.action_successful = self.action_successful and not self.error_message and not self.failed_locales

    @property
    def has_partial_failure(self) -> bool:
        return bool(self.failed_locales) and bool(self.loaded_locales or self.saved_locales)

    def format_status_report(self) -> str:
        """Generate a human-readable status report."""
        lines = [
            f"Resources Directory: {self.resources_dir}",
            f"Action: {self.action.name} at {self.action_timestamp}",
            f"Status: {'Success' if self.action_successful else 'Failed'}"
        ]
        if self.loaded_locales:
            lines.append(f"Loaded Locales: {', '.join(self.loaded_locales)}")
            lines.append(f"Translation Keys: {self.total_keys}")
        if self.saved_locales:
            lines.append(f"Saved Locales: {', '.join(self.saved_locales)}")
        if self.failures:
            lines.append("\nFailures:")
            for path, message in self.failures.items():
                lines.append(f"- {path}: {message}")
        elif self.error_message:
            lines.append(f"Error: {self.error_message}")
        return "\n".join(lines)
