from __future__ import annotations

"""
Symlink Projection Primitive.

The single place where the engine mutates the filesystem destructively.
Creates or replaces links idempotently and isolates every platform-specific
mechanic: on Windows, directory links are junctions (no privilege required)
and file links are hard links; elsewhere both are plain symbolic links.
"""

import enum
import logging
import os
import sys

from monolinker.domain.errors import FilesystemConflictError

logger = logging.getLogger(__name__)

_WIN_LONG_PATH_PREFIX = "\\\\?\\"


class SymlinkKind(enum.Enum):
    """Type of link to create."""
    FILE = "file"
    DIRECTORY = "directory"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def is_link(path: str) -> bool:
    """
    Check whether a path is a symbolic link or a Windows junction.

    Dangling links are reported as links.
    """
    if os.path.islink(path):
        return True
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


def read_link_once(link_path: str) -> str:
    """
    Follow exactly one link hop and return the absolute location it names.

    Relative link values are resolved against the link's parent folder; the
    result is not resolved any further.

    Args:
        link_path: Path of an existing symlink or junction.

    Returns:
        str: Normalized absolute path the link points at.
    """
    value = os.readlink(link_path)
    if value.startswith(_WIN_LONG_PATH_PREFIX):
        value = value[len(_WIN_LONG_PATH_PREFIX):]
    if not os.path.isabs(value):
        value = os.path.join(os.path.dirname(link_path), value)
    return os.path.normpath(value)


def ensure_symlink(
        target_path: str,
        link_path: str,
        kind: SymlinkKind = SymlinkKind.DIRECTORY,
        *,
        replace_files: bool = False,
) -> bool:
    """
    Make link_path a link to target_path, replacing a previous link.

    Existing content at link_path is handled as follows:
    - a link (even dangling) already pointing at target_path is kept;
    - any other link is removed;
    - an empty real directory is removed;
    - a regular file is removed only when replace_files is True;
    - anything else raises FilesystemConflictError and nothing is deleted.

    Args:
        target_path: Absolute path the link must point at.
        link_path: Absolute path where the link is created.
        kind: Whether the target is a file or a directory.
        replace_files: Allow replacing a regular file (engine-owned folders only).

    Returns:
        bool: True if a link was created, False if the existing link was kept.

    Raises:
        FilesystemConflictError: If link_path holds real content.
        OSError: If the platform refuses to create the link.
    """
    if is_link(link_path):
        if _points_to(link_path, target_path):
            logger.debug(f"Link already up to date: {link_path}")
            return False
        _remove_link(link_path)
    elif os.path.isdir(link_path):
        if os.listdir(link_path):
            raise FilesystemConflictError(
                f"Refusing to replace non-empty directory with a link: {link_path}",
                path=link_path,
            )
        os.rmdir(link_path)
    elif os.path.lexists(link_path):
        if not replace_files:
            raise FilesystemConflictError(
                f"Refusing to replace existing file with a link: {link_path}",
                path=link_path,
            )
        os.remove(link_path)

    _create_link(target_path, link_path, kind)
    logger.debug(f"Linked {link_path} -> {target_path}")
    return True


def remove_link(link_path: str) -> None:
    """
    Remove a link without touching the content it points at.

    Raises:
        FilesystemConflictError: If link_path is not a link.
    """
    if not is_link(link_path):
        raise FilesystemConflictError(f"Not a link, refusing to remove: {link_path}", path=link_path)
    _remove_link(link_path)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _points_to(link_path: str, target_path: str) -> bool:
    try:
        current = read_link_once(link_path)
    except OSError:
        return False
    return os.path.normcase(current) == os.path.normcase(os.path.normpath(os.path.abspath(target_path)))


def _remove_link(link_path: str) -> None:
    # Directory links and junctions on Windows must be removed with rmdir
    if sys.platform == "win32":
        try:
            os.rmdir(link_path)
            return
        except OSError:
            pass
    os.unlink(link_path)


def _create_link(target_path: str, link_path: str, kind: SymlinkKind) -> None:
    if sys.platform == "win32":
        if kind is SymlinkKind.DIRECTORY:
            import _winapi
            _winapi.CreateJunction(os.path.abspath(target_path), link_path)
        else:
            os.link(target_path, link_path)
        return

    os.symlink(target_path, link_path, target_is_directory=(kind is SymlinkKind.DIRECTORY))
