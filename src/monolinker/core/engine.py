from __future__ import annotations

"""
Core linking orchestration.

This module coordinates a complete linking run:
1. Validates configuration and resolves the workspace layout.
2. Skips the run if the workspace is already linked (unless forced).
3. Reads every project's plan, failing fast on configuration errors.
4. Links projects in parallel with the configured strategy.
5. Persists the link manifest only if every project succeeded.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional

from monolinker.core.linking import create_strategy
from monolinker.core.manifest import LinkManifest, read_link_plans
from monolinker.core.validator import validate_config
from monolinker.domain.errors import ConfigurationError, LinkerError
from monolinker.domain.link_models import (
    LinkRunResult,
    ProjectFailure,
    create_error_result,
    create_skipped_result,
    create_success_result,
)
from monolinker.domain.workspace import create_layout

logger = logging.getLogger(__name__)


def run_linking(
        config: Optional[Dict[str, Any]],
        *,
        force: Optional[bool] = None,
        dry_run: Optional[bool] = None,
) -> LinkRunResult:
    """
    Execute a full linking run.

    Args:
        config: The configuration dictionary (raw or partial).
        force: Overrides config["force"]: relink even if a link manifest exists.
        dry_run: Overrides config["dry_run"]: build trees without touching disk.

    Returns:
        LinkRunResult: Object containing status, per-project entries and failures.

    Raises:
        ConfigurationError: If the project graph is inconsistent with the
            backend output. Raised before any project is linked.
    """
    logger.info("Linking run started.")

    # -------------------------------------------------------------------------
    # 1) Config & Layout
    # -------------------------------------------------------------------------
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    if force is not None:
        cfg["force"] = force
    if dry_run is not None:
        cfg["dry_run"] = dry_run

    layout = create_layout(cfg)
    strategy_name = cfg["strategy"]
    manifest_path = layout.link_manifest_path

    if not os.path.isdir(layout.workspace_root):
        raise ConfigurationError(f"Invalid workspace directory: {layout.workspace_root}")
    if not cfg["projects"]:
        raise ConfigurationError(f"No local projects are configured for workspace {layout.workspace_root}")

    # -------------------------------------------------------------------------
    # 2) Skip Check
    # -------------------------------------------------------------------------
    if not cfg["force"] and not cfg["dry_run"] and LinkManifest.load(manifest_path) is not None:
        logger.info("Linking skipped: everything is already up to date.")
        return create_skipped_result(strategy_name, layout.workspace_root, manifest_path)

    # -------------------------------------------------------------------------
    # 3) Plans
    # -------------------------------------------------------------------------
    plans = read_link_plans(layout, cfg["projects"])
    local_projects = {plan.project.name: plan.project for plan in plans}
    strategy = create_strategy(
        strategy_name,
        layout,
        local_projects,
        dry_run=cfg["dry_run"],
        debug_tree=cfg["debug_tree"],
    )
    logger.info(f"Linking {len(plans)} project(s) with the {strategy_name} strategy")

    # -------------------------------------------------------------------------
    # 4) Link Projects in Parallel
    # -------------------------------------------------------------------------
    manifest = LinkManifest([plan.project.name for plan in plans])
    failures: Dict[str, ProjectFailure] = {}
    workers = max(1, min(cfg["max_workers"], len(plans)))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="LinkWorker") as executor:
        future_map = {executor.submit(strategy.link_project, plan): plan for plan in plans}
        for future in as_completed(future_map):
            name = future_map[future].project.name
            try:
                manifest.add(future.result())
            except (LinkerError, OSError) as e:
                logger.error(f"Failed to link {name}: {e}")
                failures[name] = ProjectFailure(project=name, error=e)

    entries = manifest.entries
    ordered_failures: List[ProjectFailure] = [
        failures[plan.project.name] for plan in plans if plan.project.name in failures
    ]

    if ordered_failures:
        result = create_error_result(
            strategy_name, layout.workspace_root, manifest_path, entries, ordered_failures,
            dry_run=cfg["dry_run"],
        )
        logger.error(result.error)
        return result

    # -------------------------------------------------------------------------
    # 5) Persist
    # -------------------------------------------------------------------------
    if cfg["dry_run"]:
        logger.info("Dry run completed: no changes were made.")
        return create_success_result(
            strategy_name, layout.workspace_root, manifest_path, entries,
            manifest_written=False, dry_run=True,
        )

    manifest.save(manifest_path)
    logger.info(f"Linking completed: {len(entries)} project(s) linked.")
    return create_success_result(
        strategy_name, layout.workspace_root, manifest_path, entries, manifest_written=True,
    )
