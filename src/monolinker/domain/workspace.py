from __future__ import annotations

"""
Workspace Layout Model.

Resolves, from a validated configuration, every absolute location the engine
reads from or writes to: the common temp folder shared with the installation
backend, staging manifests, backend install folders, engine-owned staging
areas and the link manifest artifact.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict

from monolinker.domain import constants as const
from monolinker.domain.project_models import ProjectDescriptor
from monolinker.infra.fs import package_folder, resolve_under
from monolinker.utils.package_names import encode_archive_path


@dataclass(frozen=True)
class WorkspaceLayout:
    """
    Absolute paths of a workspace and its backend output.

    Attributes:
        workspace_root: Workspace root directory.
        common_temp_folder: Folder where the backend installs shared output.
        temp_scope: Scope of the backend's private staging packages.
        staging_root: Folder holding engine-owned staging areas.
        link_manifest_path: Path of the persisted link manifest.
    """
    workspace_root: str
    common_temp_folder: str
    temp_scope: str
    staging_root: str
    link_manifest_path: str

    @property
    def temp_node_modules(self) -> str:
        return os.path.join(self.common_temp_folder, const.NODE_MODULES_FOLDER_NAME)

    @property
    def common_bin_folder(self) -> str:
        return os.path.join(self.temp_node_modules, const.BIN_FOLDER_NAME)

    def staging_manifest_path(self, project: ProjectDescriptor) -> str:
        """e.g. <temp>/projects/a/package.json"""
        return os.path.join(
            self.common_temp_folder,
            const.TEMP_PROJECTS_FOLDER_NAME,
            project.unscoped_temp_name,
            const.PACKAGE_JSON_FILENAME,
        )

    def staging_install_folder(self, project: ProjectDescriptor) -> str:
        """Nested backend: e.g. <temp>/node_modules/@monolinker-temp/a"""
        return package_folder(self.temp_node_modules, project.temp_project_name)

    def archive_path(self, project: ProjectDescriptor) -> str:
        """e.g. <temp>/projects/a.tgz"""
        return os.path.join(
            self.common_temp_folder,
            const.TEMP_PROJECTS_FOLDER_NAME,
            project.unscoped_temp_name + const.TEMP_PROJECT_ARCHIVE_EXT,
        )

    def flattened_install_folder(self, project: ProjectDescriptor) -> str:
        """Flattened backend: <temp>/node_modules/.local/<encoded archive path>/node_modules"""
        return os.path.join(
            self.temp_node_modules,
            const.FLATTENED_LOCAL_FOLDER_NAME,
            encode_archive_path(self.archive_path(project)),
            const.NODE_MODULES_FOLDER_NAME,
        )


def create_layout(cfg: Dict[str, Any]) -> WorkspaceLayout:
    """
    Build the workspace layout from a validated configuration.

    Args:
        cfg: Normalized configuration (see validate_config).

    Returns:
        WorkspaceLayout: Resolved absolute paths.
    """
    root = os.path.abspath(cfg["workspace_root"])
    common_temp = resolve_under(root, cfg["common_temp_folder"])
    return WorkspaceLayout(
        workspace_root=root,
        common_temp_folder=common_temp,
        temp_scope=cfg["temp_scope"],
        staging_root=os.path.join(common_temp, cfg["staging_folder_name"]),
        link_manifest_path=os.path.join(common_temp, cfg["link_manifest_filename"]),
    )
