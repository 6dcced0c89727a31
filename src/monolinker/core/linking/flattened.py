from __future__ import annotations

"""
Flattened Link Strategy.

Links projects against a backend that keeps one flat, content-addressed store
and exposes each project's dependencies as symlinks under a per-project
folder (pnpm-style). Every project link points where the backend's own link
points, read exactly once, so both resolve to the same physical copy.
"""

import logging
import os

from monolinker.core.linking.base import LinkStrategy, ProjectTree, read_package_version
from monolinker.domain import constants as const
from monolinker.domain.dependency_node import add_child
from monolinker.domain.errors import BackendInvariantViolationError
from monolinker.domain.project_models import ProjectLinkPlan
from monolinker.infra.fs import package_folder
from monolinker.infra.symlinks import is_link, read_link_once

logger = logging.getLogger(__name__)


class FlattenedLinkStrategy(LinkStrategy):
    """Strategy for backends that produce a flattened, symlinked store."""

    name = const.STRATEGY_FLATTENED

    def build_tree(self, plan: ProjectLinkPlan) -> ProjectTree:
        root = self.create_root(plan)
        install_folder = self.layout.flattened_install_folder(plan.project)
        optional = set(plan.staging.optional_dependencies)

        for dep_name, _ in plan.ordinary_dependencies:
            backend_link = package_folder(install_folder, dep_name)
            if not is_link(backend_link):
                if dep_name in optional and not os.path.lexists(backend_link):
                    logger.debug(f"{plan.project.name}: optional dependency {dep_name} is not installed")
                    continue
                state = "is not a symlink" if os.path.lexists(backend_link) else "does not exist"
                raise BackendInvariantViolationError(
                    f'Expected the backend location of "{dep_name}" for "{plan.project.name}" '
                    f'to be a symlink, but {backend_link} {state}',
                    project=plan.project.name,
                    dependency=dep_name,
                )

            target = read_link_once(backend_link)
            version = read_package_version(target)
            add_child(root, self.create_link(root, dep_name, version, target))

        self.add_bin_link(root)
        return ProjectTree(root=root)
