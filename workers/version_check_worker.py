"""Worker thread for checking for a newer release."""

from PyQt6.QtCore import QThread, pyqtSignal

from lib.release_checker import get_latest_release
from utils.logging_setup import get_logger

logger = get_logger("version_check_worker")

class VersionCheckWorker(QThread):
    release_checked = pyqtSignal(object)  # ReleaseData or None

    def __init__(self, repo: str, timeout: float = 30, show_up_to_date: bool = False):
        super().__init__()
        self.repo = repo
        self.timeout = timeout
        self.show_up_to_date = show_up_to_date
        logger.debug(f"Initialized VersionCheckWorker for repo: {repo}, timeout: {timeout}")

    def run(self):
        release = get_latest_release(self.repo, self.timeout)
        logger.debug(f"Version check finished with release: {release}")
        self.release_checked.emit(release)
