from __future__ import annotations

"""
Base Definitions for Link Strategies.

Provides the abstract interface shared by the Nested and Flattened strategies
and the steps both perform identically: internal links to sibling projects,
the executable shim folder and best-effort version reads.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from monolinker.core.linking.projection import project_all
from monolinker.domain import constants as const
from monolinker.domain.dependency_node import (
    DependencyNode,
    add_child,
    create_linked_node,
    create_project_root,
    render_tree,
)
from monolinker.domain.link_models import LinkManifestEntry
from monolinker.domain.project_models import ProjectDescriptor, ProjectLinkPlan
from monolinker.domain.workspace import WorkspaceLayout
from monolinker.infra.fs import package_folder, read_json_file

logger = logging.getLogger(__name__)


@dataclass
class ProjectTree:
    """
    Trees to project for one local project.

    Attributes:
        root: The project root with one child per node_modules entry.
        staging: Staging nodes claimed while building root, materialized first.
    """
    root: DependencyNode
    staging: List[DependencyNode] = field(default_factory=list)

    def render(self) -> List[str]:
        lines = render_tree(self.root)
        for node in self.staging:
            lines.extend(render_tree(node))
        return lines


class LinkStrategy(ABC):
    """
    Abstract base class for backend-specific linking algorithms.

    A strategy is created once per run and shared by every worker thread.
    """

    name: str = ""

    def __init__(
            self,
            layout: WorkspaceLayout,
            local_projects: Mapping[str, ProjectDescriptor],
            *,
            dry_run: bool = False,
            debug_tree: bool = False,
    ) -> None:
        self.layout = layout
        self.local_projects = dict(local_projects)
        self.dry_run = dry_run
        self.debug_tree = debug_tree

    @abstractmethod
    def build_tree(self, plan: ProjectLinkPlan) -> ProjectTree:
        """
        Compute the node_modules structure of one project without touching disk.

        Args:
            plan: The project's linking plan.

        Returns:
            ProjectTree: The trees to project.
        """
        pass

    def link_project(self, plan: ProjectLinkPlan) -> LinkManifestEntry:
        """
        Build and project one project's dependency tree.

        Args:
            plan: The project's linking plan.

        Returns:
            LinkManifestEntry: The project's sibling links and, for dry runs or
            debugging, its rendered tree.
        """
        project = plan.project.name
        logger.info(f"LINKING: {project}")

        tree = self.build_tree(plan)

        tree_lines: List[str] = []
        if self.dry_run or self.debug_tree:
            tree_lines = tree.render()
            for line in tree_lines:
                logger.debug(line)

        if not self.dry_run:
            created = project_all(tree.staging + [tree.root], project=project)
            logger.debug(f"{project}: {created} link(s) created or replaced")

        return LinkManifestEntry(
            project=project,
            local_links=[dep for dep, _ in plan.internal_links],
            tree_lines=tree_lines,
        )

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    def create_root(self, plan: ProjectLinkPlan) -> DependencyNode:
        """Root node plus one link per internal dependency, in plan order."""
        root = create_project_root(plan.project)
        for dep_name, sibling in plan.internal_links:
            child = self.create_link(root, dep_name, sibling.version, sibling.project_folder)
            logger.debug(f"{plan.project.name}: internal link {dep_name} -> {sibling.project_folder}")
            add_child(root, child)
        return root

    def add_bin_link(self, root: DependencyNode) -> None:
        """Link the backend's shared executable shims, if it installed any."""
        bin_folder = self.layout.common_bin_folder
        if os.path.isdir(bin_folder):
            add_child(root, self.create_link(root, const.BIN_FOLDER_NAME, None, bin_folder))

    @staticmethod
    def create_link(parent: DependencyNode, name: str, version: Optional[str], target: str) -> DependencyNode:
        node_modules = os.path.join(parent.folder_path, const.NODE_MODULES_FOLDER_NAME)
        child = create_linked_node(name, version, package_folder(node_modules, name))
        child.symlink_target_folder_path = target
        return child


def read_package_version(folder: str) -> Optional[str]:
    """
    Read the version from a package folder's manifest, best-effort.

    Returns:
        Optional[str]: The version, or None if the manifest cannot be read.
    """
    path = os.path.join(folder, const.PACKAGE_JSON_FILENAME)
    try:
        version = read_json_file(path).get("version")
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot read version from {path}: {e}")
        return None
    return str(version) if version else None
