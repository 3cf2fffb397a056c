import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path

LOGGER_NAME = "i18n_editor"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DIR = Path.home() / ".i18n_editor" / "logs"

_configured = False


def setup_logging(level=logging.INFO, log_to_file=True):
    """Configure the application logger once.

    Logs go to the console and, unless disabled, to a rotating file under
    ~/.i18n_editor/logs. The level can be overridden with I18N_EDITOR_LOG_LEVEL.
    """
    global _configured
    if _configured:
        return
    _configured = True

    env_level = os.environ.get("I18N_EDITOR_LOG_LEVEL")
    if env_level:
        level = logging.getLevelName(env_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(LOG_DIR / "i18n_editor.log", maxBytes=1_000_000,
                                               backupCount=3, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Unable to write log file in {LOG_DIR}: {e}")


def get_logger(name):
    """Get a child logger of the application logger."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
