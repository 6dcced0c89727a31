from __future__ import annotations

"""
Project Domain Data Models.

Defines the read-only descriptors handed to the linking strategies: the local
project as declared in the workspace, the backend-resolved staging manifest of
its private build, and the per-project plan produced by the Manifest Reader.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

# -----------------------------------------------------------------------------
# INPUT DESCRIPTORS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectDescriptor:
    """
    A local project managed within the workspace, editable in place.

    Attributes:
        name: Package name (may include a scope, e.g. '@scope/pkg').
        version: Version declared in the project's own manifest.
        project_folder: Absolute path to the project's source folder.
        temp_project_name: Name of the backend's private staging package.
        dependencies: Declared regular dependencies (name -> range).
        internal_dependencies: Declared names that resolve to sibling projects.
        manifest: Full parsed content of the project's package.json.
    """
    name: str
    version: str
    project_folder: str
    temp_project_name: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    internal_dependencies: Tuple[str, ...] = ()
    manifest: Dict[str, Any] = field(default_factory=dict)

    @property
    def unscoped_temp_name(self) -> str:
        """Temp project name without its scope, used for staging folder names."""
        return self.temp_project_name.split("/")[-1]


@dataclass(frozen=True)
class StagingManifest:
    """
    The backend-resolved manifest for one project's private build.

    Attributes:
        name: Staging package name.
        version: Staging package version.
        dependencies: Ordinary dependencies with exact resolved versions.
        internal_dependencies: Dependency names satisfied by local projects.
        optional_dependencies: Names the backend may legitimately skip.
        path: Absolute path of the package.json this was read from.
    """
    name: str
    version: str
    dependencies: Dict[str, str] = field(default_factory=dict)
    internal_dependencies: Tuple[str, ...] = ()
    optional_dependencies: Tuple[str, ...] = ()
    path: str = ""


# -----------------------------------------------------------------------------
# READER OUTPUT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ProjectLinkPlan:
    """
    Everything a link strategy needs to link one project.

    Attributes:
        project: The local project to link.
        staging: The project's resolved staging manifest.
        internal_links: Ordered (dependency name, matching local project) pairs.
        ordinary_dependencies: Ordered (dependency name, resolved version) pairs.
    """
    project: ProjectDescriptor
    staging: StagingManifest
    internal_links: List[Tuple[str, ProjectDescriptor]] = field(default_factory=list)
    ordinary_dependencies: List[Tuple[str, str]] = field(default_factory=list)
