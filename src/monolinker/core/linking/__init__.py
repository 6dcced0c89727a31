from __future__ import annotations

from .base import LinkStrategy, ProjectTree, read_package_version
from .factory import create_strategy
from .flattened import FlattenedLinkStrategy
from .nested import NestedLinkStrategy
from .projection import materialize_staging_folder, project_all, project_tree

__all__ = [
    "LinkStrategy",
    "ProjectTree",
    "NestedLinkStrategy",
    "FlattenedLinkStrategy",
    "create_strategy",
    "read_package_version",
    "project_tree",
    "project_all",
    "materialize_staging_folder",
]
