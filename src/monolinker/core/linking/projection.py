from __future__ import annotations

"""
Filesystem Projection Engine.

Turns dependency trees into real directories and symlinks. Project roots are
existing folders whose node_modules receives one link per child; staging
nodes are engine-owned folders that mirror a backend copy and carry their own
node_modules.
"""

import logging
import os
from typing import List, Optional, Set

from monolinker.domain import constants as const
from monolinker.domain.dependency_node import DependencyNode
from monolinker.domain.errors import FilesystemConflictError, LinkerError
from monolinker.infra.symlinks import SymlinkKind, ensure_symlink, is_link, remove_link

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def project_tree(root: DependencyNode, *, project: Optional[str] = None) -> int:
    """
    Create root/node_modules and one directory link per child of root.

    Stale links left in node_modules by earlier runs are removed; real
    directories are never touched.

    Args:
        root: Node whose folder already exists (project root or staging area).
        project: Project being linked, for error reporting. Defaults to root.name.

    Returns:
        int: Number of links created or replaced.

    Raises:
        LinkerError: If a child has no symlink target.
        FilesystemConflictError: If a link path holds real content.
    """
    owner = project or root.name
    node_modules = os.path.join(root.folder_path, const.NODE_MODULES_FOLDER_NAME)
    os.makedirs(node_modules, exist_ok=True)

    _prune_stale_links(node_modules, {child.name for child in root.children})

    created = 0
    for child in root.children:
        if not child.symlink_target_folder_path:
            raise LinkerError(
                f'Dependency "{child.name}" under "{root.name}" has no link target',
                project=owner,
                dependency=child.name,
            )
        os.makedirs(os.path.dirname(child.folder_path), exist_ok=True)
        try:
            if ensure_symlink(child.symlink_target_folder_path, child.folder_path, SymlinkKind.DIRECTORY):
                created += 1
        except FilesystemConflictError as e:
            raise FilesystemConflictError(str(e), path=e.path, project=owner, dependency=child.name) from e
    return created


def materialize_staging_folder(node: DependencyNode, *, project: Optional[str] = None) -> int:
    """
    Create an engine-owned staging folder mirroring a backend copy.

    Every top-level entry of node.mirror_folder_path except node_modules is
    linked into the folder; its node_modules is then projected from the
    node's children.

    Args:
        node: A STAGING node.
        project: Project being linked, for error reporting.

    Returns:
        int: Number of links created or replaced.

    Raises:
        FilesystemConflictError: If the folder exists but is not owned by the engine.
    """
    owner = project or node.name
    folder = node.folder_path
    marker = os.path.join(folder, const.STAGING_MARKER_FILENAME)

    if is_link(folder) or (os.path.lexists(folder) and not os.path.isdir(folder)):
        raise FilesystemConflictError(
            f"Staging path is not a directory: {folder}", path=folder, project=owner, dependency=node.name
        )
    if os.path.isdir(folder):
        if not os.path.isfile(marker):
            raise FilesystemConflictError(
                f"Refusing to reuse a staging folder not created by monolinker: {folder}",
                path=folder,
                project=owner,
                dependency=node.name,
            )
    else:
        os.makedirs(folder)
        with open(marker, "w", encoding="utf-8") as f:
            f.write(f"{node.name}@{node.version or ''}\n")
        logger.debug(f"Created staging folder {folder}")

    created = 0
    mirrored: Set[str] = set()
    source = node.mirror_folder_path or ""
    for entry in sorted(os.listdir(source)) if source else []:
        if entry in (const.NODE_MODULES_FOLDER_NAME, const.STAGING_MARKER_FILENAME):
            continue
        src = os.path.join(source, entry)
        dst = os.path.join(folder, entry)
        mirrored.add(entry)
        if os.path.isdir(src):
            target = os.path.realpath(src) if is_link(src) else src
            kind = SymlinkKind.DIRECTORY
        else:
            target = src
            kind = SymlinkKind.FILE
        try:
            if ensure_symlink(target, dst, kind, replace_files=True):
                created += 1
        except FilesystemConflictError as e:
            raise FilesystemConflictError(str(e), path=e.path, project=owner, dependency=node.name) from e

    _prune_stale_mirror_entries(folder, mirrored)
    return created + project_tree(node, project=owner)


def project_all(roots: List[DependencyNode], *, project: str) -> int:
    """Materialize staging nodes and project every other root, in order."""
    total = 0
    for node in roots:
        if node.mirror_folder_path:
            total += materialize_staging_folder(node, project=project)
        else:
            total += project_tree(node, project=project)
    return total


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _prune_stale_links(node_modules: str, keep: Set[str]) -> None:
    """Unlink entries of a node_modules folder that are links not listed in keep."""
    for entry in os.listdir(node_modules):
        path = os.path.join(node_modules, entry)
        if entry.startswith("@") and os.path.isdir(path) and not is_link(path):
            for scoped in os.listdir(path):
                full_name = f"{entry}/{scoped}"
                scoped_path = os.path.join(path, scoped)
                if full_name not in keep and is_link(scoped_path):
                    logger.warning(f"Removing stale link {scoped_path}")
                    remove_link(scoped_path)
            if not os.listdir(path):
                os.rmdir(path)
            continue
        if entry in keep:
            continue
        if is_link(path):
            logger.warning(f"Removing stale link {path}")
            remove_link(path)
        elif os.path.isdir(path) and not entry.startswith("."):
            logger.warning(f"Leaving unmanaged folder in place: {path}")


def _prune_stale_mirror_entries(folder: str, mirrored: Set[str]) -> None:
    for entry in os.listdir(folder):
        if entry in mirrored or entry in (const.NODE_MODULES_FOLDER_NAME, const.STAGING_MARKER_FILENAME):
            continue
        path = os.path.join(folder, entry)
        if is_link(path):
            remove_link(path)
        elif os.path.isfile(path):
            # Hard links on Windows
            os.remove(path)
