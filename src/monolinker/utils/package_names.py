from __future__ import annotations

"""
Package Name Utilities.

Helpers for npm-style package names: scope parsing, staging package naming
and the strict URI-component encoding the flattened backend applies to
archive paths when naming its per-project install folders.
"""

import os
import re
from typing import Dict, Iterable, Tuple
from urllib.parse import quote


def parse_scoped_name(name: str) -> Tuple[str, str]:
    """
    Split a package name into (scope, unscoped name).

    Args:
        name: e.g. '@scope/pkg' or 'pkg'.

    Returns:
        Tuple[str, str]: ('@scope', 'pkg') or ('', 'pkg').

    Raises:
        ValueError: If the name is empty or the scope is malformed.
    """
    if not name:
        raise ValueError("Package name must not be empty")
    if name.startswith("@"):
        scope, sep, unscoped = name.partition("/")
        if not sep or len(scope) < 2 or not unscoped or "/" in unscoped:
            raise ValueError(f'Invalid scoped package name "{name}"')
        return scope, unscoped
    if "/" in name:
        raise ValueError(f'Invalid package name "{name}"')
    return "", name


def assign_temp_project_names(names: Iterable[str], temp_scope: str) -> Dict[str, str]:
    """
    Derive the backend staging package name of every local project.

    Each project maps to '<temp_scope>/<unscoped name>'. Projects whose
    unscoped names collide receive '-2', '-3', ... suffixes in input order.

    Args:
        names: Local project names, in configuration order.
        temp_scope: Scope of the staging packages, e.g. '@monolinker-temp'.

    Returns:
        Dict[str, str]: Project name -> staging package name.
    """
    assigned: Dict[str, str] = {}
    used = set()
    for name in names:
        _, unscoped = parse_scoped_name(name)
        candidate = unscoped
        counter = 2
        while candidate in used:
            candidate = f"{unscoped}-{counter}"
            counter += 1
        used.add(candidate)
        assigned[name] = f"{temp_scope}/{candidate}"
    return assigned


def encode_uri_component_strict(value: str) -> str:
    """
    Percent-encode every character except unreserved ones (A-Z a-z 0-9 - _ . ~).

    Matches encodeURIComponent followed by escaping of !'()*.
    """
    return quote(value, safe="")


def encode_archive_path(path: str) -> str:
    """
    Encode an archive path the way the flattened backend names its install folder.

    The native path is first joined with '/' separators, then strictly encoded,
    e.g. 'C:\\repo\\common\\temp\\projects\\a.tgz' -> 'C%3A%2Frepo%2F...%2Fa.tgz'.
    """
    return encode_uri_component_strict("/".join(path.split(os.sep)))


def staging_folder_basename(name: str, version: str) -> str:
    """
    Build a filesystem-safe folder name keyed by (name, version).

    '@scope/pkg' at '1.0.0' becomes '@scope+pkg@1.0.0'.
    """
    safe_version = re.sub(r"[^A-Za-z0-9._+-]", "_", version) or "0.0.0"
    return f"{name.replace('/', '+')}@{safe_version}"
