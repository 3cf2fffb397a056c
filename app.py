import os
import sys

from PyQt6.QtWidgets import (QApplication, QMainWindow, QWidget, QVBoxLayout,
                             QLabel, QFileDialog, QMessageBox, QSplitter,
                             QScrollArea, QLineEdit, QStackedWidget)
from PyQt6.QtGui import QAction, QActionGroup, QKeySequence
from PyQt6.QtCore import Qt

from editor.edit_session import EditSession
from editor.errors import EditorError, InvalidLocaleError, ResourceWriteError
from editor.key_path import KeyPath
from editor.resource_codecs import ResourceType
from editor.session_results import SessionResults
from lib.release_checker import is_newer_version
from ui.app_style import AppStyle
from ui.dialogs import (confirm_conflict_resolver, show_about_dialog, show_error_dialog,
                        show_input_dialog, show_release_dialog, show_warning_dialog)
from ui.resource_field import ResourceField
from ui.translation_tree import TranslationTree
from utils.globals import Globals
from utils.logging_setup import get_logger, setup_logging
from utils.settings_manager import SettingsManager
from utils.translations import I18N
from workers.version_check_worker import VersionCheckWorker

logger = get_logger("app")

# Set up translation
_ = I18N._

class MainWindow(QMainWindow):
    def __init__(self, settings_manager: SettingsManager = None):
        super().__init__()
        logger.debug("Initializing MainWindow")
        self.setAcceptDrops(True)

        # Initialize settings manager
        self.settings_manager = settings_manager or SettingsManager(max_history=Globals.HISTORY_SIZE)

        # Initialize state
        self.session = EditSession(
            conflict_resolver=confirm_conflict_resolver(self),
            minify_output=self.settings_manager.get("minify_output", Globals.DEFAULT_MINIFY_OUTPUT),
        )
        self.session.add_dirty_listener(self.handle_dirty_changed)
        self.resource_fields: list[ResourceField] = []
        self.version_worker = None

        self.setup_ui()
        self.setup_menu()
        self.update_ui()

    def setup_ui(self):
        self.stack = QStackedWidget()
        self.setCentralWidget(self.stack)

        # Intro shown while no resources directory is open
        self.intro_label = QLabel(_("Drop an existing translations folder here or go to File > Import Resources"))
        self.intro_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.intro_label.setWordWrap(True)
        self.intro_label.setStyleSheet(f"font-size: 24px; padding: 15px; color: {AppStyle.get_intro_text_color()};")
        self.stack.addWidget(self.intro_label)

        # Translation tree with key entry field
        translations_panel = QWidget()
        translations_layout = QVBoxLayout(translations_panel)
        translations_layout.setContentsMargins(0, 0, 0, 0)
        self.translation_tree = TranslationTree()
        self.translation_tree.key_selected.connect(self.handle_key_selected)
        self.key_field = QLineEdit()
        self.key_field.setPlaceholderText(_("Enter a translation key and press Enter to add it"))
        self.key_field.returnPressed.connect(self.handle_key_field_entered)
        translations_layout.addWidget(self.translation_tree)
        translations_layout.addWidget(self.key_field)

        # One field per locale
        self.resources_panel = QWidget()
        self.resources_layout = QVBoxLayout(self.resources_panel)
        self.resources_layout.setContentsMargins(10, 10, 10, 10)
        self.resources_layout.addStretch()
        self.resources_scroll = QScrollArea()
        self.resources_scroll.setWidgetResizable(True)
        self.resources_scroll.setWidget(self.resources_panel)

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.addWidget(translations_panel)
        self.splitter.addWidget(self.resources_scroll)
        self.splitter.setStretchFactor(1, 1)
        self.stack.addWidget(self.splitter)

    def setup_menu(self):
        menu_bar = self.menuBar()

        # File menu
        file_menu = menu_bar.addMenu(_("&File"))
        import_action = file_menu.addAction(_("&Import Resources..."))
        import_action.setShortcut(QKeySequence.StandardKey.Open)
        import_action.triggered.connect(self.show_import_dialog)

        self.recent_menu = file_menu.addMenu(_("Open &Recent"))

        self.add_locale_menu = file_menu.addMenu(_("&Add Locale"))
        # Configured default type first, reachable with a shortcut
        resource_types = [Globals.DEFAULT_RESOURCE_TYPE] + [t for t in ResourceType if t != Globals.DEFAULT_RESOURCE_TYPE]
        for resource_type in resource_types:
            action = self.add_locale_menu.addAction(resource_type.display_name + "...")
            action.triggered.connect(lambda checked, t=resource_type: self.show_add_locale_dialog(t))
            if resource_type == Globals.DEFAULT_RESOURCE_TYPE:
                action.setShortcut(QKeySequence("Ctrl+L"))

        file_menu.addSeparator()
        self.save_action = file_menu.addAction(_("&Save"))
        self.save_action.setShortcut(QKeySequence.StandardKey.Save)
        self.save_action.triggered.connect(self.save_resources)
        self.reload_action = file_menu.addAction(_("Re&load"))
        self.reload_action.setShortcut(QKeySequence.StandardKey.Refresh)
        self.reload_action.triggered.connect(self.reload_resources)
        file_menu.addSeparator()
        exit_action = file_menu.addAction(_("E&xit"))
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)

        # Edit menu
        edit_menu = menu_bar.addMenu(_("&Edit"))
        self.add_translation_action = edit_menu.addAction(_("&Add Translation..."))
        self.add_translation_action.setShortcut(QKeySequence.StandardKey.New)
        self.add_translation_action.triggered.connect(self.show_add_translation_dialog)
        self.find_translation_action = edit_menu.addAction(_("&Find Translation..."))
        self.find_translation_action.setShortcut(QKeySequence.StandardKey.Find)
        self.find_translation_action.triggered.connect(self.show_find_translation_dialog)
        edit_menu.addSeparator()
        self.rename_translation_action = edit_menu.addAction(_("&Rename Translation..."))
        self.rename_translation_action.setShortcut(QKeySequence("F2"))
        self.rename_translation_action.triggered.connect(self.rename_selected_translation)
        self.duplicate_translation_action = edit_menu.addAction(_("D&uplicate Translation..."))
        self.duplicate_translation_action.triggered.connect(self.duplicate_selected_translation)
        self.remove_translation_action = edit_menu.addAction(_("R&emove Translation"))
        self.remove_translation_action.setShortcut(QKeySequence.StandardKey.Delete)
        self.remove_translation_action.triggered.connect(self.remove_selected_translation)

        # Settings menu
        settings_menu = menu_bar.addMenu(_("&Settings"))
        self.minify_action = QAction(_("&Minify Output"), self, checkable=True)
        self.minify_action.setChecked(self.session.minify_output)
        self.minify_action.toggled.connect(self.set_minify_output)
        settings_menu.addAction(self.minify_action)

        # Help menu
        help_menu = menu_bar.addMenu(_("&Help"))
        update_action = help_menu.addAction(_("Check for &Updates..."))
        update_action.triggered.connect(lambda: self.check_for_new_version(show_up_to_date=True))
        about_action = help_menu.addAction(_("&About"))
        about_action.triggered.connect(lambda: show_about_dialog(self))

        self.edit_actions = QActionGroup(self)
        self.edit_actions.setExclusive(False)
        for action in (self.add_translation_action, self.find_translation_action, self.rename_translation_action,
                       self.duplicate_translation_action, self.remove_translation_action):
            self.edit_actions.addAction(action)

    def launch(self):
        """Restore the previous editor state and show the window."""
        x, y, width, height = self.settings_manager.get_window_geometry()
        self.resize(width, height)
        self.move(x, y)
        self.show()
        divider_pos = self.settings_manager.get_divider_pos()
        self.splitter.setSizes([divider_pos, max(width - divider_pos, 1)])

        last_dir = self.settings_manager.load_last_resources_dir()
        if last_dir:
            self.import_resources(last_dir, expanded=self.settings_manager.get_last_expanded(),
                                  selected=self.settings_manager.get_last_selected())
        else:
            self.update_history()
            self.show_import_dialog()

        if Globals.VERSION_CHECK_ENABLED:
            self.check_for_new_version(show_up_to_date=False)

    def update_ui(self):
        has_dir = self.session.is_open
        has_resources = bool(self.session.resources)
        self.stack.setCurrentWidget(self.splitter if has_dir else self.intro_label)
        self.add_locale_menu.setEnabled(has_dir)
        self.reload_action.setEnabled(has_dir)
        self.save_action.setEnabled(self.session.dirty)
        self.edit_actions.setEnabled(has_resources)
        self.translation_tree.setEnabled(has_resources)
        self.key_field.setEnabled(has_resources)
        self.update_title()

    def update_title(self):
        dirty_part = "*" if self.session.dirty else ""
        dir_part = f"{self.session.resources_dir} - " if self.session.resources_dir else ""
        self.setWindowTitle(f"{dirty_part}{dir_part}{Globals.TITLE}")

    def update_history(self):
        if self.session.resources_dir:
            self.settings_manager.add_to_history(self.session.resources_dir)
        self.recent_menu.clear()
        history = list(reversed(self.settings_manager.load_history()))
        for directory in history:
            action = self.recent_menu.addAction(directory)
            action.triggered.connect(lambda checked, d=directory: self.import_resources(d))
        self.recent_menu.setEnabled(bool(history))

    def rebuild_resource_fields(self):
        for field in self.resource_fields:
            self.resources_layout.removeWidget(field)
            field.deleteLater()
        self.resource_fields = []
        for resource in sorted(self.session.resources):
            field = ResourceField(resource)
            field.value_changed.connect(self.handle_value_changed)
            self.resources_layout.insertWidget(self.resources_layout.count() - 1, field)
            self.resource_fields.append(field)
        self.handle_key_selected(self.translation_tree.selected_key())

    def refresh_tree(self, selected=None, expanded=None):
        self.translation_tree.populate(self.session, expanded=expanded, selected=selected)

    def handle_dirty_changed(self, dirty):
        self.save_action.setEnabled(dirty)
        self.update_title()

    def handle_key_selected(self, key):
        node = self.session.find_node(KeyPath.from_string(key)) if key else None
        editable = node is not None and node.is_leaf
        if key:
            self.key_field.setText(key)
        for field in self.resource_fields:
            value = field.resource.get(node.path) if node is not None else ""
            field.set_value(value, editable)

    def handle_value_changed(self, locale, value):
        key = self.translation_tree.selected_key()
        if not key:
            return
        try:
            self.session.store_translation(locale, KeyPath.from_string(key), value)
        except EditorError as e:
            logger.warning(f"Could not store translation for {locale}: {e}")

    def handle_key_field_entered(self):
        key = self.key_field.text().strip()
        if KeyPath.is_valid(key):
            self.add_translation_key(key)

    def close_current_session(self) -> bool:
        """Ask to save unsaved changes.

        Returns:
            bool: False if the user cancelled
        """
        if not self.session.dirty:
            return True
        reply = QMessageBox.question(
            self, _("Save changes"), _("You have unsaved changes, do you want to save them?"),
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No | QMessageBox.StandardButton.Cancel)
        if reply == QMessageBox.StandardButton.Yes:
            self.save_resources()
        return reply != QMessageBox.StandardButton.Cancel

    def import_resources(self, directory, expanded=None, selected=None):
        if not self.close_current_session():
            return
        if not os.path.isdir(directory):
            show_error_dialog(self, _("Unable to open resources in {}").format(directory))
            return
        results = self.session.import_resources(directory)
        self.show_failures(results)
        self.refresh_tree(selected=selected or "", expanded=expanded or [])
        self.rebuild_resource_fields()
        self.update_history()
        self.update_ui()

    def reload_resources(self):
        if self.session.is_open:
            self.import_resources(self.session.resources_dir,
                                  expanded=self.translation_tree.expanded_keys(),
                                  selected=self.translation_tree.selected_key())

    def save_resources(self):
        results = self.session.save_resources()
        self.show_failures(results)
        self.update_ui()

    def show_failures(self, results: SessionResults):
        if results.action_successful:
            logger.info(f"{results.action.name} finished for {results.resources_dir}")
            return
        logger.warning(results.format_status_report())
        for path, message in results.failures.items():
            show_error_dialog(self, message)
        if not results.failures and results.error_message:
            show_error_dialog(self, results.error_message)

    def show_import_dialog(self):
        directory = QFileDialog.getExistingDirectory(
            self,
            _("Import Resources"),
            self.session.resources_dir or "",
            QFileDialog.Option.ShowDirsOnly
        )
        if directory:
            self.import_resources(directory)
        else:
            self.update_history()
            self.update_ui()

    def show_add_locale_dialog(self, resource_type: ResourceType):
        title = _("Add Locale ({})").format(resource_type.display_name)
        locale = ""
        while True:
            locale = show_input_dialog(self, title, _("Enter locale (i.e. en_US):"), locale)
            if locale is None:
                return
            try:
                self.session.add_locale(locale, resource_type)
                break
            except InvalidLocaleError as e:
                show_error_dialog(self, _("The locale you entered is invalid or does already exist.") + f"\n{e}")
            except ResourceWriteError as e:
                show_error_dialog(self, _("An error occurred while creating the new locale.") + f"\n{e}")
                return
        self.rebuild_resource_fields()
        self.update_ui()

    def ask_translation_key(self, title, label, text, error_message):
        """Ask for a translation key until a valid one is entered or the dialog is cancelled."""
        while True:
            value = show_input_dialog(self, title, label, text)
            if value is None:
                return None
            if KeyPath.is_valid(value):
                return KeyPath.parse(value)
            show_error_dialog(self, error_message)
            text = value

    def show_add_translation_dialog(self):
        selected = self.translation_tree.selected_key()
        key = self.ask_translation_key(_("Add Translation"), _("Enter translation key:"),
                                       f"{selected}." if selected else "",
                                       _("The translation key you entered is invalid."))
        if key is not None:
            self.add_translation_key(str(key))

    def show_find_translation_dialog(self):
        key = show_input_dialog(self, _("Find Translation"), _("Enter translation key:"))
        if key is None:
            return
        if not self.translation_tree.select_key(key):
            show_warning_dialog(self, _("The translation key you entered could not be found."),
                                _("Find Translation"))

    def add_translation_key(self, key):
        key_path = KeyPath.parse(key)
        if self.session.find_node(key_path) is None:
            if not self.session.add_key(key_path):
                return
            self.refresh_tree(selected=key)
        else:
            self.translation_tree.select_key(key)

    def remove_selected_translation(self):
        key = self.translation_tree.selected_key()
        if not key:
            return
        key_path = KeyPath.from_string(key)
        if self.session.remove_key(key_path):
            parent = str(key_path.parent) if key_path.has_parent() else ""
            self.refresh_tree(selected=parent)

    def rename_selected_translation(self):
        self.relocate_selected_translation(duplicate=False)

    def duplicate_selected_translation(self):
        self.relocate_selected_translation(duplicate=True)

    def relocate_selected_translation(self, duplicate):
        key = self.translation_tree.selected_key()
        if not key:
            return
        if duplicate:
            title, label = _("Duplicate Translation"), _("Enter new translation key:")
        else:
            title, label = _("Rename Translation"), _("Enter new translation key:")
        new_key = self.ask_translation_key(title, label, key, _("The translation key you entered is invalid."))
        if new_key is None:
            return
        old_key = KeyPath.from_string(key)
        try:
            if duplicate:
                applied = self.session.duplicate_key(old_key, new_key)
            else:
                applied = self.session.rename_key(old_key, new_key)
        except EditorError as e:
            logger.error(f"Failed to {'duplicate' if duplicate else 'rename'} {key} -> {new_key}: {e}")
            show_error_dialog(self, str(e))
            return
        if applied:
            expanded = [k for k in self.translation_tree.expanded_keys()]
            self.refresh_tree(selected=str(new_key), expanded=expanded)

    def set_minify_output(self, minify):
        self.session.minify_output = minify
        self.settings_manager.set_minify_output(minify)

    def check_for_new_version(self, show_up_to_date=False):
        if self.version_worker is not None and self.version_worker.isRunning():
            return
        self.version_worker = VersionCheckWorker(Globals.GITHUB_REPO, Globals.VERSION_CHECK_TIMEOUT, show_up_to_date)
        self.version_worker.release_checked.connect(self.handle_release_checked)
        self.version_worker.start()

    def handle_release_checked(self, release):
        newer = release is not None and is_newer_version(Globals.VERSION, release.tag_name)
        if newer or self.version_worker.show_up_to_date:
            show_release_dialog(self, release, newer)

    def store_editor_state(self):
        self.settings_manager.set_minify_output(self.session.minify_output)
        geometry = self.geometry()
        self.settings_manager.set_window_geometry(geometry.x(), geometry.y(), geometry.width(), geometry.height())
        sizes = self.splitter.sizes()
        if sizes:
            self.settings_manager.set_divider_pos(sizes[0])
        if self.session.resources:
            self.settings_manager.set_tree_state(self.translation_tree.expanded_keys(),
                                                 self.translation_tree.selected_key())
        self.settings_manager.store()

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dropEvent(self, event):
        urls = [url for url in event.mimeData().urls() if url.isLocalFile()]
        if not urls:
            return
        path = urls[0].toLocalFile()
        event.acceptProposedAction()
        self.import_resources(path)

    def closeEvent(self, event):
        """Handle application closing."""
        if not self.close_current_session():
            event.ignore()
            return
        self.store_editor_state()
        if self.version_worker is not None:
            self.version_worker.wait(1000)
        event.accept()

def main():
    setup_logging()
    I18N.install_locale()
    app = QApplication(sys.argv)
    AppStyle.sync_theme_from_application(app)
    window = MainWindow()
    window.launch()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
