import json
import os
from pathlib import Path
from typing import Optional, Any

from utils.logging_setup import get_logger

logger = get_logger("settings_manager")

class SettingsManager:
    MAX_HISTORY = 5
    DEFAULT_WINDOW_WIDTH = 1024
    DEFAULT_WINDOW_HEIGHT = 768
    DEFAULT_DIVIDER_POS = 250

    def __init__(self, settings_file=None, max_history=None):
        self.settings_file = Path(settings_file) if settings_file else Path.home() / '.i18n_editor' / 'settings.json'
        self.max_history = max_history or SettingsManager.MAX_HISTORY
        self.settings = self._read()

    def _read(self) -> dict:
        if not self.settings_file.exists():
            return {}
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                settings = json.load(f)
            if isinstance(settings, dict):
                return settings
            logger.warning(f"Ignoring malformed settings file {self.settings_file}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read settings from {self.settings_file}: {e}")
        return {}

    def store(self) -> bool:
        """Write the current settings to disk.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4)
            return True
        except OSError as e:
            logger.error(f"Error saving settings to {self.settings_file}: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    def set(self, key: str, value: Any):
        self.settings[key] = value

    def load_history(self) -> list[str]:
        """Load the recently opened resource directories.

        Returns:
            list: Directory paths, most recent last
        """
        history = self.settings.get('history', [])
        if not isinstance(history, list):
            return []
        return [p for p in history if isinstance(p, str)]

    def add_to_history(self, resources_dir: str) -> list[str]:
        """Move `resources_dir` to the end of the history, dropping the oldest entries.

        Args:
            resources_dir (str): The directory that was opened

        Returns:
            list: The updated history, most recent last
        """
        history = self.load_history()
        if resources_dir in history:
            history.remove(resources_dir)
        history.append(resources_dir)
        history = history[-self.max_history:]
        self.settings['history'] = history
        return history

    def remove_from_history(self, resources_dir: str):
        history = self.load_history()
        if resources_dir in history:
            history.remove(resources_dir)
            self.settings['history'] = history

    def load_last_resources_dir(self) -> Optional[str]:
        """Get the most recent history entry that still exists on disk.

        Returns:
            str: The directory if it exists, None otherwise
        """
        history = self.load_history()
        if history and os.path.isdir(history[-1]):
            return history[-1]
        return None

    def get_minify_output(self) -> bool:
        return bool(self.settings.get('minify_output', False))

    def set_minify_output(self, minify: bool):
        self.settings['minify_output'] = bool(minify)

    def get_window_geometry(self) -> tuple[int, int, int, int]:
        """Get the stored window bounds.

        Returns:
            tuple: (x, y, width, height)
        """
        return (
            self._get_int('window_pos_x', 0),
            self._get_int('window_pos_y', 0),
            self._get_int('window_width', self.DEFAULT_WINDOW_WIDTH),
            self._get_int('window_height', self.DEFAULT_WINDOW_HEIGHT),
        )

    def set_window_geometry(self, x: int, y: int, width: int, height: int):
        self.settings['window_pos_x'] = x
        self.settings['window_pos_y'] = y
        self.settings['window_width'] = width
        self.settings['window_height'] = height

    def get_divider_pos(self) -> int:
        return self._get_int('divider_pos', self.DEFAULT_DIVIDER_POS)

    def set_divider_pos(self, pos: int):
        self.settings['divider_pos'] = pos

    def get_last_expanded(self) -> list[str]:
        expanded = self.settings.get('last_expanded', [])
        return expanded if isinstance(expanded, list) else []

    def get_last_selected(self) -> str:
        return self.settings.get('last_selected') or ""

    def set_tree_state(self, expanded_keys: list[str], selected_key: Optional[str]):
        """Remember which translation keys were expanded and selected."""
        self.settings['last_expanded'] = list(expanded_keys)
        self.settings['last_selected'] = selected_key or ""

    def _get_int(self, key: str, default: int) -> int:
        try:
            return int(self.settings.get(key, default))
        except (TypeError, ValueError):
            return default
