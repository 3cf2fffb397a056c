from typing import Optional

from PyQt6.QtWidgets import QInputDialog, QLineEdit, QMessageBox
from PyQt6.QtCore import Qt

from editor.key_path import KeyPath
from editor.namespace_tree import ConflictKind
from editor.sync_engine import ConflictResolver
from lib.release_checker import ReleaseData
from utils.globals import Globals
from utils.translations import I18N

_ = I18N._


def show_input_dialog(parent, title: str, label: str, text: str = "") -> Optional[str]:
    """Ask the user for a line of text.

    Returns:
        str: The stripped input, or None if the dialog was cancelled
    """
    value, ok = QInputDialog.getText(parent, title, label, QLineEdit.EchoMode.Normal, text)
    if not ok:
        return None
    return value.strip()


def show_error_dialog(parent, message: str, title: Optional[str] = None):
    QMessageBox.critical(parent, title or _("Error"), message)


def show_warning_dialog(parent, message: str, title: Optional[str] = None):
    QMessageBox.warning(parent, title or _("Warning"), message)


def show_confirm_dialog(parent, title: str, message: str) -> bool:
    reply = QMessageBox.question(parent, title, message,
                                 QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No)
    return reply == QMessageBox.StandardButton.Yes


def conflict_message(kind: ConflictKind) -> str:
    if kind == ConflictKind.REPLACE:
        return _("An existing translation will be replaced. Do you want to continue?")
    return _("Translations with this key prefix already exist and will be merged. Do you want to continue?")


def confirm_conflict_resolver(parent) -> ConflictResolver:
    """Build a resolver that asks the user before overwriting existing keys."""
    def resolve(old_key: KeyPath, new_key: KeyPath, kind: ConflictKind) -> bool:
        return show_confirm_dialog(parent, _("Translation key exists"), conflict_message(kind))
    return resolve


def show_about_dialog(parent):
    QMessageBox.about(parent, _("About {}").format(Globals.TITLE),
                      f"<div style=\"text-align:center;\"><b>{Globals.TITLE}</b><br>"
                      f"v{Globals.VERSION}<br><br>MIT Licensed</div>")


def show_release_dialog(parent, release: Optional[ReleaseData], newer: bool):
    """Tell the user about a newer release, or that the editor is up to date."""
    box = QMessageBox(parent)
    box.setWindowTitle(_("Version check"))
    box.setTextFormat(Qt.TextFormat.RichText)
    if newer and release is not None:
        box.setText(_("A new version is available: {}").format(release.tag_name)
                    + f"<br><a href=\"{release.html_url}\">" + _("Go to download page") + "</a>")
    else:
        box.setText(_("You are using the latest version."))
    box.setIcon(QMessageBox.Icon.Information)
    box.exec()
