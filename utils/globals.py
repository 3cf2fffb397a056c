import os

from editor.resource_codecs import ResourceType
from utils.config import ConfigManager
from utils.translations import I18N

_ = I18N._

config_manager = ConfigManager()


def _default_resource_type():
    try:
        return ResourceType.from_name(config_manager.get("resources.default_type", "json"))
    except ValueError:
        return ResourceType.JSON


class Globals:
    TITLE = "i18n-editor"
    VERSION = "1.0.0"
    HOME = os.path.expanduser("~")
    GITHUB_REPO = config_manager.get("version_check.github_repo", "jcbvm/ember-i18n-editor")
    VERSION_CHECK_ENABLED = config_manager.get("version_check.enabled", True)
    VERSION_CHECK_TIMEOUT = config_manager.get("version_check.timeout", 30)
    HISTORY_SIZE = config_manager.get("editor.history_size", 5)
    DEFAULT_MINIFY_OUTPUT = config_manager.get("editor.minify_output", False)
    DEFAULT_RESOURCE_TYPE = _default_resource_type()
