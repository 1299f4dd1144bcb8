from __future__ import annotations

import json
import re
from typing import Any

from ..domain.exceptions import ParseError
from ..domain.models import DependencySpec, ManifestKind


_PINNED_RE = re.compile(r"^([A-Za-z0-9_.-]+)(?:\[[^\]]*\])?\s*([=<>!~]+)\s*([A-Za-z0-9_.*+-]+)")
_BARE_NAME_RE = re.compile(r"^([A-Za-z0-9_.-]+)(?:\[[^\]]*\])?$")

LATEST = "latest"


def parse_manifest(content: str, kind: ManifestKind, source: str | None = None) -> list[DependencySpec]:
    """Parse manifest content into dependency specs.

    Args:
        content: Raw file content
        kind: Declared manifest format
        source: Where the content came from, named in parse errors
            (defaults to the manifest file name)

    Returns:
        One DependencySpec per unique dependency name

    Raises:
        ParseError: If the content is not valid for the declared format
    """
    if kind is ManifestKind.PACKAGE_MANIFEST:
        return parse_package_json(content, source or kind.value)
    return parse_requirements_txt(content)


def parse_package_json(content: str, source: str = "package.json") -> list[DependencySpec]:
    """Parse ``dependencies`` and ``devDependencies`` of a package.json.

    A name present in both sections keeps its ``dependencies`` entry.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(source, f"invalid JSON ({e.msg} at line {e.lineno})") from e

    if not isinstance(data, dict):
        raise ParseError(source, f"top level must be an object, got {type(data).__name__}")

    specs: dict[str, DependencySpec] = {}
    for section, dev in (("dependencies", False), ("devDependencies", True)):
        for name, version in _section_items(data, section, source):
            if name not in specs:
                specs[name] = DependencySpec(name=name, declared_version=version, dev=dev)
    return list(specs.values())


def _section_items(data: dict[str, Any], section: str, source: str) -> list[tuple[str, str]]:
    deps = data.get(section)
    if deps is None:
        return []
    if not isinstance(deps, dict):
        raise ParseError(source, f"'{section}' must be an object, got {type(deps).__name__}")

    items: list[tuple[str, str]] = []
    for name, version in deps.items():
        if not isinstance(version, str):
            raise ParseError(source, f"version of '{name}' in '{section}' must be a string")
        items.append((name, version))
    return items


def parse_requirements_txt(content: str) -> list[DependencySpec]:
    """Parse a line-oriented pinned dependency list.

    Handles ``name==1.0``, ``name>=1.0``, ``name~=1.0`` and the other operator
    combinations; a bare name is recorded with version ``latest``. Comments,
    blank lines and option lines (``-r``, ``-e``, ``--index-url``) are skipped.
    """
    specs: dict[str, DependencySpec] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or line.startswith("-"):
            continue

        # inline comments and environment markers
        line = line.split(" #", 1)[0].split(";", 1)[0].strip()
        if not line:
            continue

        match = _PINNED_RE.match(line)
        if match:
            name, version = match.group(1), match.group(3)
        else:
            bare = _BARE_NAME_RE.match(line)
            name = bare.group(1) if bare else line
            version = LATEST

        specs[name] = DependencySpec(name=name, declared_version=version)
    return list(specs.values())
