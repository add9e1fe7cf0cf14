"""
Manifest loader — turns manifest YAML into a validated Manifest.

A manifest is a mapping of section name to resources, each resource a
mapping of attributes keyed by its identity:

    directories:
      /srv/app:
        mode: "0755"
    packages:
      nginx:
      curl:
        version: "8.5"

The YAML is composed into PyYAML's node tree instead of plain Python
objects, so every error can point at a line and column.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from yaml.constructor import SafeConstructor
from yaml.nodes import MappingNode, Node, ScalarNode

from accord.core.errors import ParseError
from accord.core.models.manifest import Manifest
from accord.core.models.resource import ResourceKind
from accord.core.resources import RESOURCE_TYPES

logger = logging.getLogger(__name__)

_SECTIONS: dict[str, ResourceKind] = {kind.section: kind for kind in ResourceKind}

# attribute the mapping key is stored in
_PATH_KINDS = (ResourceKind.DIRECTORY, ResourceKind.FILE)

_NULL_TAG = "tag:yaml.org,2002:null"


def load_manifest(path: Path) -> Manifest:
    """Read and parse a manifest file.

    Relative ``source`` paths in file resources are resolved against the
    manifest's directory.

    Raises:
        ParseError: If the file cannot be read or is not a valid manifest.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ParseError("manifest file not found", source=str(path)) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"cannot read manifest: {e}", source=str(path)) from e

    logger.debug("Loading manifest %s", path)
    return parse_manifest(text, source=str(path), base_dir=path.resolve().parent)


def parse_manifest(
    text: str,
    source: str = "<manifest>",
    base_dir: Path | None = None,
) -> Manifest:
    """Parse manifest text.

    Args:
        text: Manifest YAML.
        source: Name used in error locations.
        base_dir: Directory relative file sources resolve against.

    Returns:
        A Manifest with resources in declaration order per kind, and every
        omitted attribute at its default.

    Raises:
        ParseError: With 1-based line and column of the offending node.
    """
    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        raise _error(f"invalid YAML: {e.problem or e}", source, mark) from e
    except yaml.YAMLError as e:
        raise ParseError(f"invalid YAML: {e}", source=source) from e

    manifest = Manifest(source)

    if root is None or _is_null(root):
        logger.info("Manifest %s is empty", source)
        return manifest

    if not isinstance(root, MappingNode):
        raise _error("top level must be a mapping of sections", source, root.start_mark)

    for section_node, body in root.value:
        section = _scalar_key(section_node, source)
        kind = _SECTIONS.get(section)
        if kind is None:
            known = ", ".join(_SECTIONS)
            raise _error(
                f"unknown section '{section}' (expected one of: {known})",
                source,
                section_node.start_mark,
            )
        if _is_null(body):
            continue
        if not isinstance(body, MappingNode):
            raise _error(
                f"section '{section}' must be a mapping of {kind.label.lower()} entries",
                source,
                body.start_mark,
            )
        _flatten(SafeConstructor(), body, source)
        for key_node, attrs_node in body.value:
            _add_entry(manifest, kind, key_node, attrs_node, source, base_dir)

    logger.info("Loaded %d resources from %s", len(manifest), source)
    return manifest


def _add_entry(
    manifest: Manifest,
    kind: ResourceKind,
    key_node: Node,
    attrs_node: Node,
    source: str,
    base_dir: Path | None,
) -> None:
    key = _scalar_key(key_node, source)

    if _is_null(attrs_node):
        attrs: dict[str, Any] = {}
        marks: dict[str, Any] = {}
    elif isinstance(attrs_node, MappingNode):
        attrs, marks = _construct_mapping(attrs_node, source)
    else:
        raise _error(
            f"{kind.label} '{key}' must be a mapping of attributes",
            source,
            attrs_node.start_mark,
        )

    id_field = "path" if kind in _PATH_KINDS else "name"
    if id_field in attrs and str(attrs[id_field]) != key:
        raise _error(
            f"{kind.label} '{key}': '{id_field}' does not match its key",
            source,
            marks[id_field],
        )
    attrs[id_field] = key

    if kind is ResourceKind.FILE and base_dir is not None:
        src = attrs.get("source")
        if isinstance(src, str) and not os.path.isabs(src):
            attrs["source"] = str(base_dir / src)

    model = RESOURCE_TYPES[kind]
    try:
        resource = model.model_validate(attrs)
    except ValidationError as e:
        err = e.errors()[0]
        field = err["loc"][0] if err["loc"] else None
        mark = marks.get(field, key_node.start_mark)
        where = f".{field}" if field else ""
        raise _error(f"{kind.label} '{key}'{where}: {_clean(err['msg'])}", source, mark) from e

    if manifest.add(resource):
        logger.debug("%s '%s' declared again; later declaration wins", kind.label, key)


def _construct_mapping(node: MappingNode, source: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Build an attribute dict plus the start mark of each value."""
    constructor = SafeConstructor()
    _flatten(constructor, node, source)
    attrs: dict[str, Any] = {}
    marks: dict[str, Any] = {}
    for key_node, value_node in node.value:
        name = _scalar_key(key_node, source)
        try:
            attrs[name] = constructor.construct_document(value_node)
        except yaml.MarkedYAMLError as e:
            raise _error(f"invalid value for '{name}': {e.problem}", source, e.problem_mark) from e
        marks[name] = value_node.start_mark
    return attrs, marks


def _flatten(constructor: SafeConstructor, node: MappingNode, source: str) -> None:
    """Expand ``<<`` merge keys in place; explicit keys follow merged ones."""
    try:
        constructor.flatten_mapping(node)
    except yaml.MarkedYAMLError as e:
        raise _error(f"invalid merge key: {e.problem}", source, e.problem_mark) from e


def _scalar_key(node: Node, source: str) -> str:
    if not isinstance(node, ScalarNode) or _is_null(node):
        raise _error("keys must be plain strings", source, node.start_mark)
    return str(node.value)


def _is_null(node: Node) -> bool:
    return isinstance(node, ScalarNode) and node.tag == _NULL_TAG


def _clean(msg: str) -> str:
    # pydantic prefixes custom validator messages
    return msg.removeprefix("Value error, ")


def _error(message: str, source: str, mark) -> ParseError:
    if mark is None:
        return ParseError(message, source=source)
    return ParseError(message, source=source, line=mark.line + 1, column=mark.column + 1)
