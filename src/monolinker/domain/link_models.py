from __future__ import annotations

"""
Linking Result Data Models.

Defines the structures exchanged between the link strategies, the engine and
the interface layer: the per-project manifest entry, the per-project failure
record and the aggregated run result with its factory functions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from monolinker.domain.errors import LinkerError

# -----------------------------------------------------------------------------
# PER-PROJECT RECORDS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LinkManifestEntry:
    """
    Outcome of linking a single project.

    Attributes:
        project: Name of the linked project.
        local_links: Ordered names of dependencies linked to sibling projects.
        tree_lines: Rendered dependency tree (filled for dry runs and debugging).
    """
    project: str
    local_links: List[str] = field(default_factory=list)
    tree_lines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ProjectFailure:
    """
    A fatal error that stopped one project from being linked.

    Attributes:
        project: Name of the project that failed.
        error: The typed error (LinkerError) or filesystem error raised.
    """
    project: str
    error: Exception

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    @property
    def dependency(self) -> Optional[str]:
        if isinstance(self.error, LinkerError):
            return self.error.dependency
        return None

    @property
    def message(self) -> str:
        return str(self.error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project": self.project,
            "error_type": self.error_type,
            "dependency": self.dependency,
            "message": self.message,
        }

# -----------------------------------------------------------------------------
# RUN RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LinkRunResult:
    """
    Unified result of a complete linking run.

    Attributes:
        ok: True only if every project was linked (or linking was skipped).
        error: Summary message in case of failure.
        strategy: Name of the strategy used.
        workspace_root: Absolute workspace root.
        link_manifest_path: Path of the link manifest artifact.
        manifest_written: Whether the link manifest was persisted by this run.
        skipped: True if the run was skipped because projects were already linked.
        dry_run: True if no filesystem changes were made.
        entries: Successful per-project entries, in configuration order.
        failures: Per-project failures, in configuration order.
    """
    ok: bool
    error: str
    strategy: str
    workspace_root: str
    link_manifest_path: str
    manifest_written: bool = False
    skipped: bool = False
    dry_run: bool = False
    entries: List[LinkManifestEntry] = field(default_factory=list)
    failures: List[ProjectFailure] = field(default_factory=list)

    @property
    def local_links(self) -> Dict[str, List[str]]:
        """Map of project name to its sibling links, omitting projects without any."""
        return {e.project: list(e.local_links) for e in self.entries if e.local_links}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "error": self.error,
            "strategy": self.strategy,
            "workspace_root": self.workspace_root,
            "link_manifest_path": self.link_manifest_path,
            "manifest_written": self.manifest_written,
            "skipped": self.skipped,
            "dry_run": self.dry_run,
            "projects_linked": [e.project for e in self.entries],
            "local_links": self.local_links,
            "failures": [f.to_dict() for f in self.failures],
        }

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_success_result(
        strategy: str,
        workspace_root: str,
        link_manifest_path: str,
        entries: List[LinkManifestEntry],
        *,
        manifest_written: bool,
        dry_run: bool = False,
) -> LinkRunResult:
    """Create a successful run result."""
    return LinkRunResult(
        ok=True,
        error="",
        strategy=strategy,
        workspace_root=workspace_root,
        link_manifest_path=link_manifest_path,
        manifest_written=manifest_written,
        dry_run=dry_run,
        entries=list(entries),
    )


def create_skipped_result(strategy: str, workspace_root: str, link_manifest_path: str) -> LinkRunResult:
    """Create the result of a run skipped because the workspace is already linked."""
    return LinkRunResult(
        ok=True,
        error="",
        strategy=strategy,
        workspace_root=workspace_root,
        link_manifest_path=link_manifest_path,
        skipped=True,
    )


def create_error_result(
        strategy: str,
        workspace_root: str,
        link_manifest_path: str,
        entries: List[LinkManifestEntry],
        failures: List[ProjectFailure],
        *,
        dry_run: bool = False,
) -> LinkRunResult:
    """
    Create a failed run result.

    Args:
        strategy: Strategy used.
        workspace_root: Workspace root.
        link_manifest_path: Manifest path (not written by a failed run).
        entries: Projects that were linked before or alongside the failures.
        failures: The per-project failures.
        dry_run: Whether the run was a simulation.

    Returns:
        LinkRunResult: An immutable error result object.
    """
    names = ", ".join(f.project for f in failures)
    return LinkRunResult(
        ok=False,
        error=f"Linking failed for {len(failures)} project(s): {names}",
        strategy=strategy,
        workspace_root=workspace_root,
        link_manifest_path=link_manifest_path,
        dry_run=dry_run,
        entries=list(entries),
        failures=list(failures),
    )
