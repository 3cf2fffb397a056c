"""Readers and writers for the supported translation resource formats.

Every codec turns a file into an ordered flat mapping of dotted keys to
strings and back. Nested formats (JSON, ES6, YAML) are flattened on read and
rebuilt on write; keys are always written in sorted order so repeated saves
produce stable, diff-friendly files.
"""

from enum import Enum
import io
import json
import os
import re
from typing import Dict, List, Optional, Tuple

import polib
import yaml

from .key_path import KeyPath
from utils.logging_setup import get_logger

logger = get_logger("resource_codecs")


class ResourceType(Enum):
    JSON = "json"
    ES6 = "es6"
    YAML = "yaml"
    PO = "po"

    @property
    def display_name(self) -> str:
        if self == ResourceType.ES6:
            return "ES6"
        return self.name

    @classmethod
    def from_name(cls, name: str) -> 'ResourceType':
        for resource_type in cls:
            if resource_type.name.lower() == str(name).lower() or resource_type.value == str(name).lower():
                return resource_type
        raise ValueError(f"Unknown resource type: {name}")


# File name used inside a locale directory for the directory-based formats
DIRECTORY_FILE_NAMES = {
    ResourceType.JSON: "translations.json",
    ResourceType.ES6: "translations.js",
}
FLAT_FILE_EXTENSIONS = {
    ".yml": ResourceType.YAML,
    ".yaml": ResourceType.YAML,
    ".po": ResourceType.PO,
}

ES6_PREFIX = "export default "
ES6_PATTERN = re.compile(r"^\s*export\s+default\s+(.*?);?\s*$", re.DOTALL)

# Failures a codec may raise for a missing, unreadable or malformed file
CODEC_ERRORS = (OSError, ValueError, yaml.YAMLError)


def flatten(data: dict, prefix: str = "") -> Dict[str, str]:
    """Flatten a nested mapping into dotted keys.

    Args:
        data: Nested dictionary loaded from a resource file
        prefix: Key prefix of `data` within the full structure

    Returns:
        dict: Ordered mapping like {"tasks.form.title": "Task Details"}
    """
    translations = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            translations.update(flatten(value, full_key))
        elif value is None:
            translations[full_key] = ""
        elif isinstance(value, bool):
            translations[full_key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            raise ValueError(f"Unsupported list value at key \"{full_key}\"")
        else:
            translations[full_key] = str(value)
    return translations


def unflatten(translations: Dict[str, str]) -> dict:
    """Rebuild a nested mapping from dotted keys, in sorted key order.

    A key that is also the prefix of deeper keys cannot hold both a value and
    children in a nested file; the deeper keys win and the value is dropped.
    """
    data = {}
    for key in sorted(translations, key=lambda k: KeyPath.from_string(k).segments):
        parts = key.split(KeyPath.SEPARATOR)
        current = data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            elif not isinstance(current[part], dict):
                logger.warning(f"Dropping value of \"{part}\" to write nested key \"{key}\"")
                current[part] = {}
            current = current[part]
        if isinstance(current.get(parts[-1]), dict):
            logger.warning(f"Dropping value of \"{key}\" because it has nested keys")
            continue
        current[parts[-1]] = translations[key]
    return data


def _check_root(data, path):
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object at the root of {path}")
    return data


def read_json(path: str) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if not content.strip():
        return {}
    return flatten(_check_root(json.loads(content), path))


def write_json(path: str, translations: Dict[str, str], minify: bool = False):
    content = _dump_json(unflatten(translations), minify)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def read_es6(path: str) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    if not content.strip():
        return {}
    match = ES6_PATTERN.match(content)
    if not match:
        raise ValueError(f"Missing \"export default\" in {path}")
    return flatten(_check_root(json.loads(match.group(1)), path))


def write_es6(path: str, translations: Dict[str, str], minify: bool = False):
    content = ES6_PREFIX + _dump_json(unflatten(translations), minify) + ";"
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


def _dump_json(data: dict, minify: bool) -> str:
    if minify:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    return json.dumps(data, ensure_ascii=False, indent=2)


def read_yaml(path: str, locale: str) -> Dict[str, str]:
    """Read a Rails-style YAML file whose root key is the locale."""
    with open(path, "r", encoding="utf-8") as f:
        data = _check_root(yaml.safe_load(f), path)
    if not data:
        return {}
    if locale not in data:
        raise ValueError(f"Root key \"{locale}\" not found in {path}")
    return flatten(_check_root(data[locale], path))


class QuotedValueDumper(yaml.SafeDumper):
    """YAML dumper that double-quotes string values but leaves keys plain."""

    def represent_mapping(self, tag, mapping, flow_style=None):
        node = super().represent_mapping(tag, mapping, flow_style)
        for key_node, _value_node in node.value:
            # Keys like "yes" or "1" must stay quoted to read back as strings
            if self.resolve(yaml.ScalarNode, key_node.value, (True, False)) == "tag:yaml.org,2002:str":
                key_node.style = None
        return node


def _quoted_str_representer(dumper, data):
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')


QuotedValueDumper.add_representer(str, _quoted_str_representer)


def write_yaml(path: str, translations: Dict[str, str], locale: str):
    output = io.StringIO()
    yaml.dump({locale: unflatten(translations)}, output, Dumper=QuotedValueDumper,
              default_flow_style=False, allow_unicode=True, sort_keys=False, width=1000)
    with open(path, "w", encoding="utf-8") as f:
        f.write(output.getvalue())


def read_po(path: str) -> Dict[str, str]:
    po = polib.pofile(path, encoding="utf-8")
    translations = {}
    for entry in po:
        if entry.obsolete or not entry.msgid:
            continue
        translations[entry.msgid] = entry.msgstr
    return translations


def write_po(path: str, translations: Dict[str, str], locale: str):
    po = polib.POFile(encoding="utf-8")
    po.metadata = {
        "Language": locale,
        "MIME-Version": "1.0",
        "Content-Type": "text/plain; charset=UTF-8",
        "Content-Transfer-Encoding": "8bit",
    }
    for key in sorted(translations, key=lambda k: KeyPath.from_string(k).segments):
        po.append(polib.POEntry(msgid=key, msgstr=translations[key]))
    po.save(path)


def read_resource(resource_type: ResourceType, path: str, locale: str) -> Dict[str, str]:
    """Read a resource file into a flat mapping.

    Raises whatever the underlying parser raises; `ResourceStore.load` turns
    those failures into `ResourceReadError`.
    """
    if resource_type == ResourceType.JSON:
        return read_json(path)
    elif resource_type == ResourceType.ES6:
        return read_es6(path)
    elif resource_type == ResourceType.YAML:
        return read_yaml(path, locale)
    elif resource_type == ResourceType.PO:
        return read_po(path)
    raise ValueError(f"Unsupported resource type: {resource_type}")


def write_resource(resource_type: ResourceType, path: str, locale: str,
                   translations: Dict[str, str], minify: bool = False):
    if resource_type == ResourceType.JSON:
        write_json(path, translations, minify)
    elif resource_type == ResourceType.ES6:
        write_es6(path, translations, minify)
    elif resource_type == ResourceType.YAML:
        write_yaml(path, translations, locale)
    elif resource_type == ResourceType.PO:
        write_po(path, translations, locale)
    else:
        raise ValueError(f"Unsupported resource type: {resource_type}")


def resource_path(resource_type: ResourceType, directory: str, locale: str) -> str:
    """Compute where the resource for `locale` lives inside `directory`."""
    if resource_type in DIRECTORY_FILE_NAMES:
        return os.path.join(directory, locale, DIRECTORY_FILE_NAMES[resource_type])
    elif resource_type == ResourceType.YAML:
        return os.path.join(directory, f"{locale}.yml")
    elif resource_type == ResourceType.PO:
        return os.path.join(directory, f"{locale}.po")
    raise ValueError(f"Unsupported resource type: {resource_type}")


def detect_resource(path: str) -> Optional[Tuple[str, ResourceType, str]]:
    """Identify a directory entry as a resource.

    Args:
        path: A file or directory directly inside the imported directory

    Returns:
        tuple: (locale, resource type, resource file path), or None if the
            entry is not a recognised resource
    """
    name = os.path.basename(path)
    if name.startswith("."):
        return None
    if os.path.isdir(path):
        for resource_type, file_name in DIRECTORY_FILE_NAMES.items():
            file_path = os.path.join(path, file_name)
            if os.path.isfile(file_path):
                return name, resource_type, file_path
        return None
    locale, extension = os.path.splitext(name)
    resource_type = FLAT_FILE_EXTENSIONS.get(extension.lower())
    if resource_type is None or not locale:
        return None
    return locale, resource_type, path


def find_resources(directory: str) -> List[Tuple[str, ResourceType, str]]:
    """List the resources found directly inside `directory`, sorted by locale."""
    found = []
    for entry in sorted(os.scandir(directory), key=lambda e: e.name):
        detected = detect_resource(entry.path)
        if detected is not None:
            found.append(detected)
        else:
            logger.debug(f"Skipping non-resource entry {entry.path}")
    return found


def create_resource_file(resource_type: ResourceType, directory: str, locale: str) -> str:
    """Create an empty resource file for a new locale and return its path."""
    path = resource_path(resource_type, directory, locale)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    write_resource(resource_type, path, locale, {})
    logger.info(f"Created {resource_type.display_name} resource for locale {locale} at {path}")
    return path
