"""
Unit tests for the resource file codecs.
"""

import json
import os

import polib
import pytest
import yaml

from editor import resource_codecs
from editor.resource_codecs import ResourceType, flatten, unflatten


class TestFlattening:
    """Tests for converting nested mappings to dotted keys."""

    def test_flatten_nested_mapping(self):
        data = {"menu": {"file": {"open": "Open"}}, "title": "Editor"}
        assert flatten(data) == {"menu.file.open": "Open", "title": "Editor"}

    def test_flatten_converts_scalars(self):
        assert flatten({"a": None, "b": True, "c": 3}) == {"a": "", "b": "true", "c": "3"}

    def test_flatten_rejects_lists(self):
        with pytest.raises(ValueError):
            flatten({"a": ["x", "y"]})

    def test_unflatten_sorts_keys(self):
        data = unflatten({"b": "2", "a.y": "1", "a.x": "0"})
        assert list(data) == ["a", "b"]
        assert list(data["a"]) == ["x", "y"]

    def test_unflatten_deeper_keys_win(self):
        assert unflatten({"a": "value", "a.b": "nested"}) == {"a": {"b": "nested"}}


class TestFileFormats:
    """Tests for reading and writing each resource type."""

    def test_json_write_is_sorted_and_nested(self, tmp_path):
        path = str(tmp_path / "translations.json")
        resource_codecs.write_json(path, {"b": "B", "a.c": "C"})
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert json.loads(content) == {"a": {"c": "C"}, "b": "B"}
        assert content.index('"a"') < content.index('"b"')
        assert "\n" in content

    def test_json_minify(self, tmp_path):
        path = str(tmp_path / "translations.json")
        resource_codecs.write_json(path, {"a.b": "x"}, minify=True)
        with open(path, encoding="utf-8") as f:
            assert f.read() == '{"a":{"b":"x"}}'

    def test_json_empty_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "translations.json"
        path.write_text("", encoding="utf-8")
        assert resource_codecs.read_json(str(path)) == {}

    def test_json_root_must_be_object(self, tmp_path):
        path = tmp_path / "translations.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            resource_codecs.read_json(str(path))

    def test_es6_format(self, tmp_path):
        path = str(tmp_path / "translations.js")
        resource_codecs.write_es6(path, {"menu.open": "Öffnen"})
        with open(path, encoding="utf-8") as f:
            content = f.read()
        assert content.startswith("export default {")
        assert content.rstrip().endswith("};")
        assert resource_codecs.read_es6(path) == {"menu.open": "Öffnen"}

    def test_es6_requires_export(self, tmp_path):
        path = tmp_path / "translations.js"
        path.write_text('{"a": "b"}', encoding="utf-8")
        with pytest.raises(ValueError):
            resource_codecs.read_es6(str(path))

    def test_yaml_uses_locale_root(self, tmp_path):
        path = str(tmp_path / "en.yml")
        resource_codecs.write_yaml(path, {"menu.open": "Open", "yes": "true"}, "en")
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        assert data == {"en": {"menu": {"open": "Open"}, "yes": "true"}}
        assert resource_codecs.read_yaml(path, "en") == {"menu.open": "Open", "yes": "true"}

    def test_yaml_missing_locale_root(self, tmp_path):
        path = tmp_path / "en.yml"
        path.write_text("nl:\n  a: b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            resource_codecs.read_yaml(str(path), "en")

    def test_po_uses_key_as_msgid(self, tmp_path):
        path = str(tmp_path / "de.po")
        resource_codecs.write_po(path, {"menu.open": "Öffnen", "title": ""}, "de")
        po = polib.pofile(path)
        assert [(entry.msgid, entry.msgstr) for entry in po] == [("menu.open", "Öffnen"), ("title", "")]
        assert po.metadata["Language"] == "de"
        assert resource_codecs.read_po(path) == {"menu.open": "Öffnen", "title": ""}


class TestResourceDiscovery:
    """Tests for locating resources inside a directory."""

    def test_find_resources(self, tmp_path):
        for resource_type, locale in [(ResourceType.JSON, "en"), (ResourceType.ES6, "fr"),
                                      (ResourceType.YAML, "nl"), (ResourceType.PO, "de")]:
            resource_codecs.create_resource_file(resource_type, str(tmp_path), locale)
        (tmp_path / "notes.txt").write_text("not a resource", encoding="utf-8")
        (tmp_path / "empty").mkdir()

        found = [(locale, resource_type) for locale, resource_type, _ in resource_codecs.find_resources(str(tmp_path))]
        assert found == [("de", ResourceType.PO), ("en", ResourceType.JSON),
                         ("fr", ResourceType.ES6), ("nl", ResourceType.YAML)]

    def test_resource_path(self, tmp_path):
        directory = str(tmp_path)
        assert resource_codecs.resource_path(ResourceType.JSON, directory, "en") == \
            os.path.join(directory, "en", "translations.json")
        assert resource_codecs.resource_path(ResourceType.YAML, directory, "en") == os.path.join(directory, "en.yml")

    def test_created_files_read_back_empty(self, tmp_path):
        for resource_type in ResourceType:
            path = resource_codecs.create_resource_file(resource_type, str(tmp_path), "xx")
            assert resource_codecs.read_resource(resource_type, path, "xx") == {}

    def test_resource_type_from_name(self):
        assert ResourceType.from_name("JSON") == ResourceType.JSON
        assert ResourceType.from_name("es6") == ResourceType.ES6
        with pytest.raises(ValueError):
            ResourceType.from_name("xml")
