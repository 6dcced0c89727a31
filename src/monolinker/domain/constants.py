from __future__ import annotations

"""
Domain Constants.

Centralizes the folder and file names that describe the on-disk contract
shared with the installation backend, plus the identifiers of the supported
linking strategies.
"""

from typing import Tuple

CURRENT_CONFIG_VERSION = "1.0.0"
WORKSPACE_CONFIG_FILENAME = "monolinker.json"

# -----------------------------------------------------------------------------
# BACKEND LAYOUT
# -----------------------------------------------------------------------------
NODE_MODULES_FOLDER_NAME = "node_modules"
PACKAGE_JSON_FILENAME = "package.json"
BIN_FOLDER_NAME = ".bin"

DEFAULT_COMMON_TEMP_FOLDER = "common/temp"
TEMP_PROJECTS_FOLDER_NAME = "projects"
DEFAULT_TEMP_SCOPE = "@monolinker-temp"

# Flattened backend: per-project installs live under node_modules/.local/<encoded tgz path>
FLATTENED_LOCAL_FOLDER_NAME = ".local"
TEMP_PROJECT_ARCHIVE_EXT = ".tgz"

# -----------------------------------------------------------------------------
# ENGINE ARTIFACTS
# -----------------------------------------------------------------------------
DEFAULT_LINK_MANIFEST_FILENAME = "link.json"
DEFAULT_STAGING_FOLDER_NAME = "linked-deps"
STAGING_MARKER_FILENAME = ".monolinker-staging"

# -----------------------------------------------------------------------------
# STRATEGIES
# -----------------------------------------------------------------------------
STRATEGY_NESTED = "nested"
STRATEGY_FLATTENED = "flattened"
SUPPORTED_STRATEGIES: Tuple[str, ...] = (STRATEGY_NESTED, STRATEGY_FLATTENED)

DEFAULT_MAX_WORKERS = 4
