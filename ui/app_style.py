from PyQt6.QtGui import QPalette
from PyQt6.QtWidgets import QApplication


class AppStyle:
    IS_DEFAULT_THEME = False
    LIGHT_THEME = "light"
    DARK_THEME = "dark"

    @staticmethod
    def get_theme_name():
        return AppStyle.DARK_THEME if AppStyle.IS_DEFAULT_THEME else AppStyle.LIGHT_THEME

    @staticmethod
    def sync_theme_from_application(app: QApplication):
        """Persist the detected app theme in shared style state."""
        window_color = app.palette().color(QPalette.ColorRole.Window)
        AppStyle.IS_DEFAULT_THEME = window_color.lightness() < 128

    @staticmethod
    def get_intro_text_color() -> str:
        return "#6b6b6b" if AppStyle.get_theme_name() == AppStyle.DARK_THEME else "#9a9a9a"

    @staticmethod
    def get_missing_value_style() -> str:
        """Style sheet for a locale field whose translation is still empty."""
        if AppStyle.get_theme_name() == AppStyle.DARK_THEME:
            return "QPlainTextEdit { background-color: rgb(120, 90, 30); }"  # deep amber
        return "QPlainTextEdit { background-color: rgb(255, 255, 200); }"  # light yellow
