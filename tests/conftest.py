"""
i18n Editor Test Fixtures

Shared fixtures for all tests.
"""

import json
import os
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def write_json_resource(directory, locale, data):
    """Write a nested JSON resource at <directory>/<locale>/translations.json."""
    locale_dir = Path(directory) / locale
    locale_dir.mkdir(parents=True, exist_ok=True)
    path = locale_dir / "translations.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


# =============================================================================
# RESOURCE FIXTURES
# =============================================================================

@pytest.fixture
def resources_dir(tmp_path) -> str:
    """Directory with an English and a Dutch JSON resource."""
    write_json_resource(tmp_path, "en", {
        "menu": {"file": {"open": "Open", "save": "Save"}, "edit": "Edit"},
        "title": "Editor",
    })
    write_json_resource(tmp_path, "nl", {
        "menu": {"file": {"open": "Openen"}},
        "title": "Bewerker",
        "greeting": "Hallo",
    })
    return str(tmp_path)


@pytest.fixture
def session(resources_dir):
    """Edit session opened on `resources_dir` that never confirms conflicts."""
    from editor.edit_session import EditSession
    session = EditSession()
    results = session.import_resources(resources_dir)
    assert results.action_successful
    return session


@pytest.fixture
def make_store(tmp_path):
    """Factory for in-memory JSON resource stores."""
    from editor.resource_codecs import ResourceType
    from editor.resource_store import ResourceStore

    def _make(locale, translations):
        path = os.path.join(str(tmp_path), locale, "translations.json")
        return ResourceStore(locale, path, ResourceType.JSON, translations)
    return _make
