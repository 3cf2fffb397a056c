import gettext
import locale
import os

from utils.logging_setup import get_logger

logger = get_logger("translations")


def _default_user_language():
    _locale = os.environ['LANG'] if "LANG" in os.environ else None
    if not _locale:
        _locale = locale.getlocale()[0]
    if not _locale:
        return "en"
    if "_" in _locale:
        _locale = _locale[:_locale.index("_")]
    return _locale


class I18N:
    localedir = os.path.join(os.path.dirname(os.path.abspath(os.path.dirname(__file__))), 'locale')
    locale = "en"
    translate = None

    @staticmethod
    def install_locale(locale=None):
        I18N.locale = locale or _default_user_language()
        I18N.translate = gettext.translation('base', I18N.localedir, languages=[I18N.locale], fallback=True)
        logger.debug("Switched locale to: " + I18N.locale)

    @staticmethod
    def _(s):
        if I18N.translate is None:
            return s
        return I18N.translate.gettext(s)
