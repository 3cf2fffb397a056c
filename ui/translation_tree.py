from typing import Iterable, Optional

from PyQt6.QtWidgets import QTreeWidget, QTreeWidgetItem, QAbstractItemView
from PyQt6.QtCore import Qt, pyqtSignal

from editor.edit_session import EditSession
from utils.logging_setup import get_logger

logger = get_logger("translation_tree")

KEY_ROLE = Qt.ItemDataRole.UserRole


class TranslationTree(QTreeWidget):
    """Tree view of the translation keys of an edit session.

    The widget is rebuilt from the session after every structural edit;
    expanded and selected keys are carried over by key.
    """
    key_selected = pyqtSignal(str)  # Emitted with the selected key, "" for none

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setHeaderHidden(True)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setSortingEnabled(True)
        self.sortByColumn(0, Qt.SortOrder.AscendingOrder)
        self._items: dict[str, QTreeWidgetItem] = {}
        self.itemSelectionChanged.connect(self._on_selection_changed)

    def populate(self, session: EditSession, expanded: Optional[Iterable[str]] = None,
                 selected: Optional[str] = None):
        """Rebuild the items from the session tree.

        Args:
            session: The session whose tree is shown
            expanded: Keys to expand, defaults to the currently expanded keys
            selected: Key to select, defaults to the current selection
        """
        expanded = set(self.expanded_keys() if expanded is None else expanded)
        selected = self.selected_key() if selected is None else selected

        self.blockSignals(True)
        self.setSortingEnabled(False)
        self.clear()
        self._items = {}
        for node in session.iter_nodes():
            key = str(node.path)
            parent_item = self._items.get(str(node.path.parent)) if node.path.has_parent() else None
            item = QTreeWidgetItem(parent_item if parent_item is not None else self)
            item.setText(0, node.name)
            item.setData(0, KEY_ROLE, key)
            if not node.is_leaf:
                font = item.font(0)
                font.setBold(True)
                item.setFont(0, font)
            self._items[key] = item
        self.setSortingEnabled(True)
        self.sortByColumn(0, Qt.SortOrder.AscendingOrder)
        self.expand_keys(expanded)
        self.blockSignals(False)

        if not self.select_key(selected):
            self.key_selected.emit("")
        logger.debug(f"Populated translation tree with {len(self._items)} nodes")

    def has_key(self, key: str) -> bool:
        return key in self._items

    def selected_key(self) -> str:
        items = self.selectedItems()
        if not items:
            return ""
        return items[0].data(0, KEY_ROLE)

    def select_key(self, key: str) -> bool:
        """Select and reveal the item for `key`.

        Returns:
            bool: False if no item exists for the key
        """
        item = self._items.get(key) if key else None
        if item is None:
            return False
        parent = item.parent()
        while parent is not None:
            parent.setExpanded(True)
            parent = parent.parent()
        self.setCurrentItem(item)
        self.scrollToItem(item)
        return True

    def expanded_keys(self) -> list[str]:
        return [key for key, item in self._items.items() if item.isExpanded()]

    def expand_keys(self, keys: Iterable[str]):
        for key in keys:
            item = self._items.get(key)
            if item is not None:
                item.setExpanded(True)

    def _on_selection_changed(self):
        self.key_selected.emit(self.selected_key())
