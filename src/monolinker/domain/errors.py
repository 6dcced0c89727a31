from __future__ import annotations

"""
Linking Error Taxonomy.

Defines the typed failures surfaced by the linking engine. Every error names
the offending project and, where applicable, the dependency, so that callers
can report precisely which precondition of the installation backend output
was violated. None of these conditions are transient: no retries are attempted.
"""

from typing import Optional


class LinkerError(Exception):
    """
    Base class for every failure raised by the linking engine.

    Attributes:
        project: Name of the local project being linked (if known).
        dependency: Name of the dependency involved (if applicable).
    """

    def __init__(
            self,
            message: str,
            *,
            project: Optional[str] = None,
            dependency: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.project = project
        self.dependency = dependency


class ConfigurationError(LinkerError):
    """
    The project graph is inconsistent with the resolved backend output.

    Raised before any linking starts, e.g. when an internal dependency name has
    no matching local project or a staging manifest is missing.
    """


class MissingDependencyError(LinkerError):
    """A declared dependency has no installed copy in the backend's nested layout."""


class BackendInvariantViolationError(LinkerError):
    """The flattened backend's per-project location is missing or is not a symlink."""


class FilesystemConflictError(LinkerError):
    """
    A link path holds real content that the engine does not own.

    Attributes:
        path: The conflicting filesystem path. Nothing at this path was deleted.
    """

    def __init__(
            self,
            message: str,
            *,
            path: str,
            project: Optional[str] = None,
            dependency: Optional[str] = None,
    ) -> None:
        super().__init__(message, project=project, dependency=dependency)
        self.path = path


class DuplicateDependencyError(LinkerError):
    """Two children with the same name were added under one parent (strategy bug)."""
