"""
Tests for EditSession batch operations and locale management.
"""

import os

import pytest

from editor.edit_session import EditSession
from editor.errors import InvalidLocaleError
from editor.key_path import KeyPath
from editor.resource_codecs import ResourceType
from editor.session_results import SessionAction

from conftest import write_json_resource


def k(key):
    return KeyPath.parse(key)


class TestImport:
    """Tests for importing a resources directory."""

    def test_import_builds_union_tree(self, session, resources_dir):
        assert session.resources_dir == resources_dir
        assert session.locales == ["en", "nl"]
        assert sorted(str(path) for path in session.tree.keys()) == [
            "greeting", "menu.edit", "menu.file.open", "menu.file.save", "title"]
        assert session.dirty is False
        assert session.is_consistent()

    def test_import_skips_broken_resource(self, resources_dir):
        broken = os.path.join(resources_dir, "fr.yml")
        with open(broken, "w", encoding="utf-8") as f:
            f.write("fr: [unclosed\n")

        session = EditSession()
        results = session.import_resources(resources_dir)

        assert results.action_successful is False
        assert results.has_partial_failure
        assert results.failed_locales == ["fr"]
        assert broken in results.failures
        assert session.locales == ["en", "nl"]
        assert session.is_consistent()

    def test_import_value_and_group_across_locales(self, tmp_path):
        """Deeper keys win when one locale nests below another's translation."""
        write_json_resource(tmp_path, "en", {"title": "Editor", "menu": {"open": "Open"}})
        write_json_resource(tmp_path, "nl", {"title": {"short": "Bew"}})

        session = EditSession()
        session.import_resources(str(tmp_path))

        assert session.get_translations(k("title")) == {"en": None, "nl": None}
        assert session.get_translations(k("title.short")) == {"en": None, "nl": "Bew"}
        assert not session.find_node(k("title")).is_leaf
        assert session.dirty is True
        assert session.is_consistent()

    def test_import_non_directory_keeps_session(self, session, tmp_path):
        results = session.import_resources(str(tmp_path / "missing"))
        assert results.action_successful is False
        assert session.locales == ["en", "nl"]

    def test_import_empty_directory(self, tmp_path):
        session = EditSession()
        results = session.import_resources(str(tmp_path))
        assert results.action_successful is True
        assert session.is_open
        assert session.resources == []
        assert len(session.tree) == 0

    def test_reload_discards_changes(self, session):
        session.add_key(k("new.key"))
        results = session.reload_resources()
        assert results.action == SessionAction.RELOAD
        assert session.find_node(k("new.key")) is None
        assert session.dirty is False


class TestSave:
    """Tests for saving resources."""

    def test_save_writes_all_resources(self, session, resources_dir):
        session.store_translation("nl", k("title"), "Titel")
        results = session.save_resources()
        assert results.action_successful
        assert results.saved_locales == ["en", "nl"]
        assert session.dirty is False

        reopened = EditSession()
        reopened.import_resources(resources_dir)
        assert reopened.get_translations(k("title")) == {"en": "Editor", "nl": "Titel"}

    def test_save_failure_keeps_dirty(self, session, tmp_path):
        session.add_key(k("new"))
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        session.get_resource("nl").path = os.path.join(str(blocker), "translations.json")

        results = session.save_resources()

        assert results.action_successful is False
        assert results.saved_locales == ["en"]
        assert results.failed_locales == ["nl"]
        assert session.dirty is True

    def test_minify_output(self, session, resources_dir):
        session.minify_output = True
        session.add_key(k("a"))
        session.save_resources()
        with open(os.path.join(resources_dir, "en", "translations.json"), encoding="utf-8") as f:
            assert "\n" not in f.read()


class TestDirtyTracking:
    """Tests for dirty state notifications."""

    def test_listener_called_on_change_only(self, session):
        events = []
        session.add_dirty_listener(events.append)
        session.add_key(k("a"))
        session.add_key(k("b"))
        session.save_resources()
        assert events == [True, False]


class TestLocales:
    """Tests for adding and removing locales."""

    @pytest.mark.parametrize("resource_type", list(ResourceType))
    def test_add_locale(self, session, resource_type):
        resource = session.add_locale("fr", resource_type)
        assert resource.type == resource_type
        assert os.path.exists(resource.path)
        assert "fr" in session.locales
        assert session.get_translations(k("title"))["fr"] is None
        assert session.is_consistent()

    def test_added_locale_receives_new_keys(self, session):
        session.add_locale("fr", ResourceType.JSON)
        session.add_key(k("menu.help"))
        assert session.get_translations(k("menu.help"))["fr"] == ""

    @pytest.mark.parametrize("locale", ["", "  ", "en", "f r", "../x"])
    def test_add_invalid_locale(self, session, locale):
        with pytest.raises(InvalidLocaleError):
            session.add_locale(locale, ResourceType.JSON)

    def test_add_locale_with_existing_directory(self, session, resources_dir):
        os.mkdir(os.path.join(resources_dir, "de"))
        with pytest.raises(InvalidLocaleError):
            session.add_locale("de", ResourceType.JSON)

    def test_add_locale_without_directory(self):
        with pytest.raises(InvalidLocaleError):
            EditSession().add_locale("en", ResourceType.JSON)

    def test_remove_locale_rebuilds_tree(self, session):
        assert session.remove_locale("nl") is True
        assert session.locales == ["en"]
        assert session.find_node(k("greeting")) is None
        assert session.is_consistent()
        assert session.remove_locale("nl") is False


class TestClose:
    """Tests for closing and resetting a session."""

    def test_close(self, session):
        session.close()
        assert not session.is_open
        assert session.resources == []
        assert session.dirty is False

    def test_iter_nodes_includes_groups(self, session, tmp_path):
        write_json_resource(tmp_path / "other", "en", {"a": {"b": "c"}})
        session.import_resources(str(tmp_path / "other"))
        assert [(str(node.path), node.is_leaf) for node in session.iter_nodes()] == [("a", False), ("a.b", True)]
