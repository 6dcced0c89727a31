from __future__ import annotations

"""
Dependency Node Model.

Provides the in-memory tree used by every linking strategy to describe the
node_modules structure that must exist on disk. The model is a pure tree
builder: no function in this module touches the filesystem.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from monolinker.domain.errors import DuplicateDependencyError
from monolinker.domain.project_models import ProjectDescriptor

# -----------------------------------------------------------------------------
# NODE MODEL
# -----------------------------------------------------------------------------

class NodeKind(enum.Enum):
    """Role of a node in the dependency tree."""
    PROJECT = "project"
    INSTALLED = "installed"
    LINK = "link"
    STAGING = "staging"


@dataclass
class DependencyNode:
    """
    A single entry of a dependency-resolution tree.

    Attributes:
        name: Dependency or project name (may include a scope prefix).
        version: Resolved version, or None when the strategy does not record it.
        folder_path: Absolute path this node occupies for its parent.
        kind: Role of the node (project root, backend install, link, staging area).
        symlink_target_folder_path: When set, a symlink at folder_path points here.
        children: Ordered child nodes, each at folder_path/node_modules/<name>.
        manifest_data: Parsed manifest of the dependency (Nested strategy only).
        mirror_folder_path: Backend copy mirrored into a STAGING node's folder.
        parent: Back-reference assigned by add_child.
    """
    name: str
    version: Optional[str]
    folder_path: str
    kind: NodeKind = NodeKind.LINK
    symlink_target_folder_path: Optional[str] = None
    children: List["DependencyNode"] = field(default_factory=list)
    manifest_data: Optional[Dict[str, Any]] = None
    mirror_folder_path: Optional[str] = None
    parent: Optional["DependencyNode"] = field(default=None, repr=False, compare=False)

    def find_child(self, name: str) -> Optional["DependencyNode"]:
        """Return the direct child with the given name, if any."""
        for child in self.children:
            if child.name == name:
                return child
        return None

# -----------------------------------------------------------------------------
# FACTORIES
# -----------------------------------------------------------------------------

def create_project_root(descriptor: ProjectDescriptor, version: Optional[str] = None) -> DependencyNode:
    """
    Create the root node of a local project's tree.

    The project folder already exists and is never recreated, so the root
    carries no symlink target.

    Args:
        descriptor: The local project.
        version: Version override (e.g. the staging manifest's version).

    Returns:
        DependencyNode: A PROJECT node rooted at the project folder.
    """
    return DependencyNode(
        name=descriptor.name,
        version=version if version is not None else descriptor.version,
        folder_path=descriptor.project_folder,
        kind=NodeKind.PROJECT,
    )


def create_linked_node(name: str, version: Optional[str], folder_path: str) -> DependencyNode:
    """Create a node for a location that will hold a symlink."""
    return DependencyNode(name=name, version=version, folder_path=folder_path, kind=NodeKind.LINK)


def create_installed_node(
        name: str,
        version: Optional[str],
        folder_path: str,
        manifest_data: Optional[Dict[str, Any]],
) -> DependencyNode:
    """
    Create a virtual placeholder for a copy installed by the backend.

    The caller supplies the already-parsed manifest; this module performs no I/O.
    """
    return DependencyNode(
        name=name,
        version=version,
        folder_path=folder_path,
        kind=NodeKind.INSTALLED,
        manifest_data=dict(manifest_data) if manifest_data else None,
    )


def create_staging_node(
        name: str,
        version: Optional[str],
        folder_path: str,
        mirror_folder_path: str,
) -> DependencyNode:
    """Create an engine-owned staging area that mirrors a backend copy."""
    return DependencyNode(
        name=name,
        version=version,
        folder_path=folder_path,
        kind=NodeKind.STAGING,
        mirror_folder_path=mirror_folder_path,
    )

# -----------------------------------------------------------------------------
# TREE OPERATIONS
# -----------------------------------------------------------------------------

def add_child(node: DependencyNode, child: DependencyNode) -> DependencyNode:
    """
    Append a child node, rejecting duplicate names under one parent.

    Args:
        node: The parent node.
        child: The node to append.

    Returns:
        DependencyNode: The appended child.

    Raises:
        DuplicateDependencyError: If a child with the same name already exists.
    """
    if node.find_child(child.name) is not None:
        raise DuplicateDependencyError(
            f'Dependency "{child.name}" was added twice under "{node.name}" ({node.folder_path})',
            project=node.name,
            dependency=child.name,
        )
    child.parent = node
    node.children.append(child)
    return child


def iter_nodes(node: DependencyNode) -> Iterator[DependencyNode]:
    """Yield the node and all its descendants, depth-first in child order."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def render_tree(node: DependencyNode) -> List[str]:
    """
    Render a tree as ASCII lines for diagnostics.

    Args:
        node: Root of the tree to render.

    Returns:
        List[str]: One line per node, using '├──' and '└──' connectors.
    """
    lines = [_describe(node)]
    _render_children(node, lines, prefix="")
    return lines


def _render_children(node: DependencyNode, lines: List[str], prefix: str) -> None:
    total = len(node.children)
    for i, child in enumerate(node.children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        lines.append(f"{prefix}{connector}{_describe(child)}")
        _render_children(child, lines, prefix + ("    " if is_last else "│   "))


def _describe(node: DependencyNode) -> str:
    label = node.name
    if node.version:
        label += f"@{node.version}"
    if node.symlink_target_folder_path:
        label += f" -> {node.symlink_target_folder_path}"
    elif node.kind is not NodeKind.LINK:
        label += f" [{node.kind.value}]"
    return label
