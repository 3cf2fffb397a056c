from PyQt6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPlainTextEdit
from PyQt6.QtCore import pyqtSignal

from editor.resource_store import ResourceStore
from ui.app_style import AppStyle


class ResourceField(QWidget):
    """Label and text editor showing one locale's value for the selected key."""
    value_changed = pyqtSignal(str, str)  # locale, value

    def __init__(self, resource: ResourceStore, parent=None):
        super().__init__(parent)
        self.resource = resource
        self._updating = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 5, 0, 5)

        self.label = QLabel(resource.display_name)
        self.label.setToolTip(f"{resource.locale} ({resource.type.display_name})")
        self.label.setStyleSheet("font-weight: bold;")
        layout.addWidget(self.label)

        self.editor = QPlainTextEdit()
        self.editor.setTabChangesFocus(True)
        self.editor.setMaximumHeight(100)
        self.editor.textChanged.connect(self._on_text_changed)
        layout.addWidget(self.editor)

    @property
    def locale(self) -> str:
        return self.resource.locale

    def set_value(self, value: str, editable: bool):
        """Show `value` without reporting it as an edit."""
        self._updating = True
        try:
            self.editor.setPlainText(value or "")
        finally:
            self._updating = False
        self.editor.setEnabled(editable)
        self.editor.setStyleSheet(AppStyle.get_missing_value_style() if editable and not value else "")

    def value(self) -> str:
        return self.editor.toPlainText()

    def _on_text_changed(self):
        if not self._updating:
            if self.editor.isEnabled():
                self.editor.setStyleSheet(AppStyle.get_missing_value_style() if not self.value() else "")
            self.value_changed.emit(self.resource.locale, self.value())

    def __lt__(self, other):
        return self.resource < other.resource
