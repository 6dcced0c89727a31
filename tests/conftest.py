from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A workspace builder that lays out local projects, staging manifests and
   both backend layouts (nested and flattened) under tmp_path.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from monolinker.utils.package_names import encode_archive_path  # noqa: E402

TEMP_SCOPE = "@monolinker-temp"


# -----------------------------------------------------------------------------
# Workspace Builder
# -----------------------------------------------------------------------------
def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


class Workspace:
    """
    Builds a monorepo on disk the way an installation backend leaves it.

    Layout:
    <root>/monolinker.json
    <root>/projects/<name>/package.json
    <root>/common/temp/projects/<name>/package.json      (staging manifests)
    <root>/common/temp/node_modules/...                  (backend output)
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.temp = root / "common" / "temp"
        self.node_modules = self.temp / "node_modules"
        self.projects: List[Dict[str, str]] = []
        self.root.mkdir(parents=True, exist_ok=True)

    # --- Local projects ---
    def add_project(
            self,
            name: str,
            version: str = "1.0.0",
            dependencies: Optional[Dict[str, str]] = None,
            folder: Optional[str] = None,
    ) -> Path:
        folder = folder or f"projects/{name.split('/')[-1]}"
        project_dir = self.root / folder
        manifest: Dict[str, Any] = {"name": name, "version": version}
        if dependencies:
            manifest["dependencies"] = dependencies
        write_json(project_dir / "package.json", manifest)
        self.projects.append({"packageName": name, "projectFolder": folder})
        return project_dir

    def add_staging_manifest(
            self,
            name: str,
            dependencies: Optional[Dict[str, str]] = None,
            internal: Optional[Dict[str, str]] = None,
            optional: Optional[Dict[str, str]] = None,
            temp_name: Optional[str] = None,
    ) -> Path:
        unscoped = temp_name or name.split("/")[-1]
        manifest: Dict[str, Any] = {
            "name": f"{TEMP_SCOPE}/{unscoped}",
            "version": "0.0.0",
            "dependencies": dependencies or {},
        }
        if internal is not None:
            manifest["internalDependencies"] = internal
        if optional:
            manifest["optionalDependencies"] = optional
        return write_json(self.temp / "projects" / unscoped / "package.json", manifest)

    # --- Nested backend ---
    def staging_install(self, unscoped: str) -> Path:
        """Folder where the nested backend installs a project's staging package."""
        path = self.node_modules / TEMP_SCOPE / unscoped
        path.mkdir(parents=True, exist_ok=True)
        return path

    def install(
            self,
            parent: Path,
            name: str,
            version: str,
            dependencies: Optional[Dict[str, str]] = None,
    ) -> Path:
        """Install a package into parent/node_modules/<name>."""
        folder = parent / "node_modules" / Path(*name.split("/"))
        manifest: Dict[str, Any] = {"name": name, "version": version}
        if dependencies:
            manifest["dependencies"] = dependencies
        write_json(folder / "package.json", manifest)
        (folder / "index.js").write_text(f"module.exports = '{name}@{version}';\n", encoding="utf-8")
        return folder

    def install_hoisted(self, name: str, version: str, dependencies: Optional[Dict[str, str]] = None) -> Path:
        return self.install(self.temp, name, version, dependencies)

    # --- Flattened backend ---
    def store_package(self, name: str, version: str) -> Path:
        """A package copy in the flattened backend's shared store."""
        folder = self.node_modules / ".store" / f"{name.replace('/', '+')}@{version}" / "node_modules" / Path(
            *name.split("/"))
        write_json(folder / "package.json", {"name": name, "version": version})
        return folder

    def flattened_folder(self, unscoped: str) -> Path:
        archive = str(self.temp / "projects" / f"{unscoped}.tgz")
        return self.node_modules / ".local" / encode_archive_path(archive) / "node_modules"

    def link_flattened(self, unscoped: str, name: str, target: Path, relative: bool = True) -> Path:
        """Create the backend's per-project symlink for a dependency."""
        link = self.flattened_folder(unscoped) / Path(*name.split("/"))
        link.parent.mkdir(parents=True, exist_ok=True)
        value = os.path.relpath(target, link.parent) if relative else str(target)
        os.symlink(value, link, target_is_directory=True)
        return link

    # --- Configuration ---
    def config(self, strategy: str = "nested", **extra: Any) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {
            "workspace_root": str(self.root),
            "projects": list(self.projects),
            "strategy": strategy,
        }
        cfg.update(extra)
        return cfg

    def write_config(self, strategy: str = "nested", **extra: Any) -> Path:
        data: Dict[str, Any] = {"projects": list(self.projects), "strategy": strategy}
        data.update(extra)
        return write_json(self.root / "monolinker.json", data)

    @property
    def link_manifest(self) -> Path:
        return self.temp / "link.json"


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Return an empty workspace rooted at tmp_path/repo."""
    return Workspace(tmp_path / "repo")


@pytest.fixture
def nested_workspace(workspace: Workspace) -> Workspace:
    """
    Projects 'a' and 'b' where 'a' depends on 'b' and on 'lodash@1.0.0',
    installed by the nested backend with lodash hoisted.
    """
    workspace.add_project("a", dependencies={"b": "1.0.0", "lodash": "1.0.0"})
    workspace.add_project("b")
    workspace.add_staging_manifest("a", dependencies={"lodash": "1.0.0"}, internal={"b": "1.0.0"})
    workspace.add_staging_manifest("b")
    workspace.staging_install("a")
    workspace.staging_install("b")
    workspace.install_hoisted("lodash", "1.0.0")
    return workspace


@pytest.fixture
def flattened_workspace(workspace: Workspace) -> Workspace:
    """
    Same project graph as nested_workspace, installed by the flattened backend.
    """
    if sys.platform == "win32":
        pytest.skip("Creating backend symlinks requires privileges on Windows")
    workspace.add_project("a", dependencies={"b": "1.0.0", "lodash": "1.0.0"})
    workspace.add_project("b")
    workspace.add_staging_manifest("a", dependencies={"lodash": "1.0.0"}, internal={"b": "1.0.0"})
    workspace.add_staging_manifest("b")
    store = workspace.store_package("lodash", "1.0.0")
    workspace.link_flattened("a", "lodash", store)
    return workspace
