from __future__ import annotations

"""
Nested Link Strategy.

Links projects against a backend that installs each project's private
staging package under <temp>/node_modules with nested node_modules folders
(npm-style). Dependencies are located with Node's resolution walk. A package
without dependencies of its own is linked straight to its installed copy;
otherwise it gets an engine-owned staging folder, materialized once per
(name, version) per run, whose node_modules is resolved from the installed
copy's position.
"""

import logging
import os
import threading
from typing import Any, Dict, List, Optional, Tuple

from monolinker.core.linking.base import LinkStrategy, ProjectTree
from monolinker.domain import constants as const
from monolinker.domain.dependency_node import (
    DependencyNode,
    add_child,
    create_installed_node,
    create_staging_node,
)
from monolinker.domain.errors import MissingDependencyError
from monolinker.domain.project_models import ProjectLinkPlan
from monolinker.infra.fs import package_folder, read_json_file
from monolinker.utils.package_names import staging_folder_basename

logger = logging.getLogger(__name__)


class NestedLinkStrategy(LinkStrategy):
    """Strategy for backends that produce a nested node_modules layout."""

    name = const.STRATEGY_NESTED

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # (name, version) -> staging folder claimed during this run
        self._staging_table: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def build_tree(self, plan: ProjectLinkPlan) -> ProjectTree:
        """
        Build the tree of one project.

        Trees are built one at a time, so a claim found in the staging table
        always belongs to a finished build or to a cycle in the current one.
        Claims made by a build that fails are released: the next project
        needing the same package resolves it again and reports its own error.
        """
        tree = ProjectTree(root=self.create_root(plan))
        with self._lock:
            try:
                self._resolve_dependencies(plan, tree)
            except Exception:
                for node in tree.staging:
                    self._staging_table.pop((node.name, node.version or ""), None)
                raise
        self.add_bin_link(tree.root)
        return tree

    def _resolve_dependencies(self, plan: ProjectLinkPlan, tree: ProjectTree) -> None:
        root = tree.root
        start = self.layout.staging_install_folder(plan.project)
        optional = set(plan.staging.optional_dependencies)

        for dep_name, _ in plan.ordinary_dependencies:
            installed = self._find_installed(dep_name, start)
            if installed is None:
                if dep_name in optional:
                    logger.debug(f"{plan.project.name}: optional dependency {dep_name} is not installed")
                    continue
                raise MissingDependencyError(
                    f'Cannot find installed dependency "{dep_name}" for "{plan.project.name}" '
                    f'(searched from {start})',
                    project=plan.project.name,
                    dependency=dep_name,
                )
            target = self._link_target(plan, installed, [dep_name], tree)
            add_child(root, self.create_link(root, dep_name, installed.version, target))

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def _find_installed(self, name: str, start_folder: str) -> Optional[DependencyNode]:
        """
        Resolve a package the way Node does, starting at a package folder.

        The walk checks <dir>/node_modules/<name> for start_folder and each
        ancestor, skipping node_modules folders themselves, and stops at the
        common temp folder so that the search never leaves the backend output.

        Returns:
            Optional[DependencyNode]: An INSTALLED placeholder, or None if not found.
        """
        boundary = os.path.normcase(self.layout.common_temp_folder)
        current = start_folder
        while True:
            if os.path.basename(current) != const.NODE_MODULES_FOLDER_NAME:
                candidate = package_folder(os.path.join(current, const.NODE_MODULES_FOLDER_NAME), name)
                if os.path.isdir(candidate):
                    manifest = _read_manifest(candidate)
                    version = manifest.get("version") if manifest else None
                    return create_installed_node(name, str(version) if version else None, candidate, manifest)
            parent = os.path.dirname(current)
            if os.path.normcase(current) == boundary or parent == current:
                return None
            current = parent

    def _link_target(
            self,
            plan: ProjectLinkPlan,
            installed: DependencyNode,
            chain: List[str],
            tree: ProjectTree,
    ) -> str:
        """
        Decide where the link for an installed package points.

        Args:
            plan: The project being linked.
            installed: INSTALLED placeholder of the package.
            chain: Dependency path from the project to this package.
            tree: Collects the staging nodes claimed by this project.

        Returns:
            str: The installed copy for leaf packages, else the staging folder.
        """
        manifest = installed.manifest_data or {}
        dependencies = _dependency_names(manifest)
        if not dependencies:
            return installed.folder_path

        version = installed.version or ""
        folder = os.path.join(self.layout.staging_root, staging_folder_basename(installed.name, version))
        if not self._claim(installed.name, version, folder):
            return folder

        staging = create_staging_node(installed.name, installed.version, folder, installed.folder_path)
        tree.staging.append(staging)
        optional = set(_dependency_map(manifest, "optionalDependencies"))

        for dep_name in dependencies:
            sibling = self.local_projects.get(dep_name)
            if sibling is not None:
                add_child(staging, self.create_link(staging, dep_name, sibling.version, sibling.project_folder))
                continue

            nested = self._find_installed(dep_name, installed.folder_path)
            if nested is None:
                if dep_name in optional:
                    logger.debug(f"{plan.project.name}: optional dependency {installed.name} > {dep_name} is not installed")
                    continue
                path = " > ".join(chain + [dep_name])
                raise MissingDependencyError(
                    f'Cannot find installed dependency "{path}" for "{plan.project.name}"',
                    project=plan.project.name,
                    dependency=path,
                )
            target = self._link_target(plan, nested, chain + [dep_name], tree)
            add_child(staging, self.create_link(staging, dep_name, nested.version, target))

        return folder

    def _claim(self, name: str, version: str, folder: str) -> bool:
        """Return True if this caller is the first to claim the staging folder. Caller holds _lock."""
        key = (name, version)
        if key in self._staging_table:
            return False
        self._staging_table[key] = folder
        return True


def _read_manifest(folder: str) -> Optional[Dict[str, Any]]:
    path = os.path.join(folder, const.PACKAGE_JSON_FILENAME)
    try:
        return read_json_file(path)
    except (OSError, ValueError) as e:
        logger.debug(f"Cannot read manifest {path}: {e}")
        return None


def _dependency_map(manifest: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = manifest.get(key)
    return value if isinstance(value, dict) else {}


def _dependency_names(manifest: Dict[str, Any]) -> List[str]:
    """Runtime dependency names of an installed package, regular ones first."""
    names = list(_dependency_map(manifest, "dependencies"))
    names.extend(n for n in _dependency_map(manifest, "optionalDependencies") if n not in names)
    return names
