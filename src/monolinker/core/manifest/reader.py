from __future__ import annotations

"""
Manifest Reader.

Loads the local project set declared in the workspace configuration, reads
each project's backend-resolved staging manifest and splits its dependencies
into internal links (satisfied by sibling projects) and ordinary dependencies
(satisfied by the installation backend). Any inconsistency between the project
graph and the backend output is fatal: it means the project set changed
without re-resolving.
"""

import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from monolinker.domain import constants as const
from monolinker.domain.errors import ConfigurationError
from monolinker.domain.project_models import (
    ProjectDescriptor,
    ProjectLinkPlan,
    StagingManifest,
)
from monolinker.domain.workspace import WorkspaceLayout
from monolinker.infra.fs import read_json_file, resolve_under
from monolinker.utils.package_names import assign_temp_project_names, parse_scoped_name

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def load_projects(
        layout: WorkspaceLayout,
        project_entries: List[Dict[str, str]],
) -> List[ProjectDescriptor]:
    """
    Read the package.json of every configured local project.

    Args:
        layout: Resolved workspace layout.
        project_entries: Configured {packageName, projectFolder} entries, in order.

    Returns:
        List[ProjectDescriptor]: Descriptors in configuration order.

    Raises:
        ConfigurationError: On duplicate names, missing folders, unreadable
            manifests or a manifest whose name differs from the configuration.
    """
    names = [entry["packageName"] for entry in project_entries]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate project names in workspace configuration: {', '.join(duplicates)}")

    for name in names:
        try:
            parse_scoped_name(name)
        except ValueError as e:
            raise ConfigurationError(str(e), project=name) from e

    temp_names = assign_temp_project_names(names, layout.temp_scope)
    local_names = set(names)

    projects: List[ProjectDescriptor] = []
    for entry in project_entries:
        name = entry["packageName"]
        folder = resolve_under(layout.workspace_root, entry["projectFolder"])
        if not os.path.isdir(folder):
            raise ConfigurationError(f'Project folder for "{name}" does not exist: {folder}', project=name)

        manifest_path = os.path.join(folder, const.PACKAGE_JSON_FILENAME)
        manifest = _read_manifest(manifest_path, project=name)

        declared_name = manifest.get("name")
        if declared_name != name:
            raise ConfigurationError(
                f'Package name "{declared_name}" in {manifest_path} does not match configured name "{name}"',
                project=name,
            )

        dependencies = _string_map(manifest.get("dependencies"))
        dev_dependencies = _string_map(manifest.get("devDependencies"))
        internal = tuple(
            dep for dep in list(dependencies) + [d for d in dev_dependencies if d not in dependencies]
            if dep in local_names and dep != name
        )

        projects.append(ProjectDescriptor(
            name=name,
            version=str(manifest.get("version") or "0.0.0"),
            project_folder=folder,
            temp_project_name=temp_names[name],
            dependencies=dependencies,
            internal_dependencies=internal,
            manifest=manifest,
        ))
        logger.debug(f"Loaded project {name} from {folder}")

    return projects


def read_staging_manifest(layout: WorkspaceLayout, project: ProjectDescriptor) -> StagingManifest:
    """
    Read the backend-resolved manifest of a project's private staging package.

    Args:
        layout: Resolved workspace layout.
        project: The local project.

    Returns:
        StagingManifest: Parsed staging manifest.

    Raises:
        ConfigurationError: If the manifest is missing or unreadable.
    """
    path = layout.staging_manifest_path(project)
    if not os.path.exists(path):
        raise ConfigurationError(
            f'Staging manifest for "{project.name}" not found at {path}. Run the install step first.',
            project=project.name,
        )
    data = _read_manifest(path, project=project.name)

    internal_raw = data.get("internalDependencies")
    if isinstance(internal_raw, dict):
        internal: Optional[Tuple[str, ...]] = tuple(internal_raw.keys())
    elif isinstance(internal_raw, list):
        internal = tuple(str(x) for x in internal_raw)
    else:
        internal = None

    # Older backends do not list internal dependencies separately
    if internal is None:
        internal = project.internal_dependencies

    return StagingManifest(
        name=str(data.get("name") or project.temp_project_name),
        version=str(data.get("version") or "0.0.0"),
        dependencies=_string_map(data.get("dependencies")),
        internal_dependencies=internal,
        optional_dependencies=tuple(_string_map(data.get("optionalDependencies")).keys()),
        path=path,
    )


def build_link_plan(
        project: ProjectDescriptor,
        staging: StagingManifest,
        projects_by_name: Mapping[str, ProjectDescriptor],
) -> ProjectLinkPlan:
    """
    Split one project's resolved dependencies into internal and ordinary ones.

    Args:
        project: The local project.
        staging: Its staging manifest.
        projects_by_name: Every local project keyed by name.

    Returns:
        ProjectLinkPlan: The project's linking plan.

    Raises:
        ConfigurationError: If an internal dependency matches no local project.
    """
    internal_links: List[Tuple[str, ProjectDescriptor]] = []
    for dep_name in staging.internal_dependencies:
        matched = projects_by_name.get(dep_name)
        if matched is None:
            raise ConfigurationError(
                f'Cannot find internal dependency "{dep_name}" for "{project.name}" in the workspace configuration',
                project=project.name,
                dependency=dep_name,
            )
        internal_links.append((dep_name, matched))

    internal_names = set(staging.internal_dependencies)
    ordinary: List[Tuple[str, str]] = [
        (dep, version) for dep, version in staging.dependencies.items() if dep not in internal_names
    ]
    listed = {dep for dep, _ in ordinary}
    # Optional dependencies are listed after regular ones; the strategy decides whether they were installed
    for dep in staging.optional_dependencies:
        if dep not in internal_names and dep not in listed:
            ordinary.append((dep, ""))

    return ProjectLinkPlan(
        project=project,
        staging=staging,
        internal_links=internal_links,
        ordinary_dependencies=ordinary,
    )


def read_link_plans(layout: WorkspaceLayout, project_entries: List[Dict[str, str]]) -> List[ProjectLinkPlan]:
    """
    Produce the linking plan of every local project.

    Reads everything up front so that configuration errors surface before any
    project is linked.

    Args:
        layout: Resolved workspace layout.
        project_entries: Configured project entries, in order.

    Returns:
        List[ProjectLinkPlan]: One plan per project, in configuration order.
    """
    projects = load_projects(layout, project_entries)
    by_name = {p.name: p for p in projects}

    plans: List[ProjectLinkPlan] = []
    for project in projects:
        staging = read_staging_manifest(layout, project)
        plans.append(build_link_plan(project, staging, by_name))

    logger.info(f"Read {len(plans)} project manifest(s) from {layout.workspace_root}")
    return plans


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _read_manifest(path: str, *, project: str) -> Dict[str, Any]:
    try:
        return read_json_file(path)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Cannot read manifest {path}: {e}", project=project) from e


def _string_map(value: Any) -> Dict[str, str]:
    """Keep the string-valued entries of a manifest dependency map, in order."""
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if isinstance(k, str)}
