from __future__ import annotations

"""
Link Strategy Factory.

Selects the strategy matching the installation backend once per run.
"""

from typing import Dict, Mapping, Type

from monolinker.core.linking.base import LinkStrategy
from monolinker.core.linking.flattened import FlattenedLinkStrategy
from monolinker.core.linking.nested import NestedLinkStrategy
from monolinker.domain import constants as const
from monolinker.domain.errors import ConfigurationError
from monolinker.domain.project_models import ProjectDescriptor
from monolinker.domain.workspace import WorkspaceLayout

_STRATEGIES: Dict[str, Type[LinkStrategy]] = {
    const.STRATEGY_NESTED: NestedLinkStrategy,
    const.STRATEGY_FLATTENED: FlattenedLinkStrategy,
}


def create_strategy(
        name: str,
        layout: WorkspaceLayout,
        local_projects: Mapping[str, ProjectDescriptor],
        *,
        dry_run: bool = False,
        debug_tree: bool = False,
) -> LinkStrategy:
    """
    Instantiate the link strategy registered under a name.

    Args:
        name: 'nested' or 'flattened'.
        layout: Resolved workspace layout.
        local_projects: Every local project keyed by name.
        dry_run: Build trees without touching disk.
        debug_tree: Render trees into the manifest entries.

    Returns:
        LinkStrategy: A strategy instance shared by all workers of the run.

    Raises:
        ConfigurationError: If the name is not a known strategy.
    """
    strategy_cls = _STRATEGIES.get((name or "").strip().lower())
    if strategy_cls is None:
        raise ConfigurationError(
            f'Unknown linking strategy "{name}". Expected one of: {", ".join(sorted(_STRATEGIES))}'
        )
    return strategy_cls(layout, local_projects, dry_run=dry_run, debug_tree=debug_tree)
