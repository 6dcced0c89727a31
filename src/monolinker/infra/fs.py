from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform path manipulation, manifest reading and directory
utilities. Acts as an abstraction over the 'os' module to ensure uniform
behavior across Windows and Unix-like systems.
"""

import json
import os
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "monolinker"
UNIX_APP_DIR_NAME = ".monolinker"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/monolinker
    - Linux/Mac: ~/.monolinker

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a directory path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def resolve_under(base_dir: str, path: str) -> str:
    """
    Resolve a possibly relative path against a base directory.

    Args:
        base_dir: Absolute directory used for relative inputs.
        path: Absolute or base-relative path (either separator style).

    Returns:
        str: Normalized absolute path.
    """
    p = os.path.expandvars(os.path.expanduser(path))
    if not os.path.isabs(p):
        p = os.path.join(base_dir, *p.replace("\\", "/").split("/"))
    return os.path.normpath(os.path.abspath(p))


def package_folder(parent_folder: str, package_name: str) -> str:
    """
    Compute the folder a package occupies inside a node_modules directory.

    Scoped names ('@scope/pkg') map to nested folders.

    Args:
        parent_folder: The node_modules directory.
        package_name: Package name, optionally scoped.

    Returns:
        str: Absolute folder path for the package.
    """
    return os.path.join(parent_folder, *package_name.split("/"))

# -----------------------------------------------------------------------------
# MANIFEST I/O
# -----------------------------------------------------------------------------

def read_json_file(path: str) -> Dict[str, Any]:
    """
    Read a JSON object from disk.

    Args:
        path: Absolute path of the JSON file.

    Returns:
        Dict[str, Any]: The parsed object.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the content is not valid JSON or not an object.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, found {type(data).__name__}")
    return data


def write_json_file_atomic(path: str, data: Any) -> None:
    """
    Write JSON through a sibling temporary file and an atomic replace.

    Readers never observe a partially written file.

    Args:
        path: Destination file path.
        data: JSON-serializable payload.
    """
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    tmp_path = f"{path}.{os.getpid()}.tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="\n") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
