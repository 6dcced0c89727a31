from __future__ import annotations

from .reader import build_link_plan, load_projects, read_link_plans, read_staging_manifest
from .writer import LinkManifest

__all__ = [
    "LinkManifest",
    "build_link_plan",
    "load_projects",
    "read_link_plans",
    "read_staging_manifest",
]
