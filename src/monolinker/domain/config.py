from __future__ import annotations

"""
Workspace Configuration Management.

Handles the workspace-level configuration file (monolinker.json) stored at the
workspace root. Provides the default runtime configuration and merges the
persisted values over it.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from monolinker.domain import constants as const

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config(workspace_root: Optional[str] = None) -> Dict[str, Any]:
    """
    Generate the default runtime configuration.
    This dictionary drives the behavior of the linking engine.

    Args:
        workspace_root: Workspace root directory. Defaults to the current directory.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Workspace layout
        "workspace_root": workspace_root or os.getcwd(),
        "common_temp_folder": const.DEFAULT_COMMON_TEMP_FOLDER,
        "projects": [],

        # Backend contract
        "strategy": const.STRATEGY_NESTED,
        "temp_scope": const.DEFAULT_TEMP_SCOPE,

        # Engine artifacts
        "link_manifest_filename": const.DEFAULT_LINK_MANIFEST_FILENAME,
        "staging_folder_name": const.DEFAULT_STAGING_FOLDER_NAME,

        # Execution
        "max_workers": const.DEFAULT_MAX_WORKERS,
        "force": False,
        "dry_run": False,

        # Diagnostics
        "debug_tree": False,
        "save_log": False,
        "log_file": "",
    }


def get_config_path(workspace_root: str) -> str:
    """Resolve the absolute path of the workspace configuration file."""
    return os.path.join(os.path.abspath(workspace_root), const.WORKSPACE_CONFIG_FILENAME)


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(workspace_root: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the workspace configuration from disk, merged over the defaults.

    A missing file yields the defaults. A corrupted file is logged and
    ignored; validation of individual fields happens in the validator.

    Args:
        workspace_root: Workspace root directory. Defaults to the current directory.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    root = os.path.abspath(workspace_root or os.getcwd())
    config = get_default_config(root)
    config_path = get_config_path(root)

    if not os.path.exists(config_path):
        logger.debug(f"Workspace config not found at {config_path}. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load workspace config {config_path}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Corrupted workspace config {config_path}. Using defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    # The file location defines the root unless it says otherwise
    if not data.get("workspace_root"):
        config["workspace_root"] = root
    elif not os.path.isabs(config["workspace_root"]):
        config["workspace_root"] = os.path.join(root, config["workspace_root"])
    return config


def save_config(config: Dict[str, Any]) -> None:
    """
    Persist a configuration into its workspace root.

    Args:
        config: The configuration to save. 'workspace_root' selects the target.
    """
    root = config.get("workspace_root") or os.getcwd()
    config_path = get_config_path(root)
    payload = {k: v for k, v in config.items() if k not in ("workspace_root", "dry_run", "force")}
    payload["version"] = const.CURRENT_CONFIG_VERSION
    try:
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
        logger.debug(f"Workspace configuration saved to {config_path}")
    except OSError as e:
        logger.error(f"Failed to save workspace configuration: {e}")
