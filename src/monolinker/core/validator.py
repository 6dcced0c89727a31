from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the linking engine, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, path
normalization and default value injection.
"""

import logging
import os
from typing import Any, Dict, List, Tuple

from monolinker.domain import constants as const
from monolinker.domain.config import get_default_config
from monolinker.infra.fs import normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI flags, hand-edited JSON) into strictly typed
    parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition
    string_fields = [
        "workspace_root", "common_temp_folder", "temp_scope",
        "link_manifest_filename", "staging_folder_name", "log_file",
    ]
    bool_fields = ["force", "dry_run", "debug_tree", "save_log"]

    # 3. Field Processing
    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults.get(field, ""), field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults.get(field, False), field, warnings, strict)

    merged["max_workers"] = _as_positive_int(
        merged.get("max_workers"), defaults["max_workers"], "max_workers", warnings, strict
    )
    merged["strategy"] = _as_choice(
        merged.get("strategy"), defaults["strategy"], const.SUPPORTED_STRATEGIES,
        "strategy", warnings, strict
    )
    merged["projects"] = _as_project_list(merged.get("projects"), warnings, strict)

    # 4. Domain-Specific Normalization
    merged["workspace_root"] = normalize_path(merged["workspace_root"], os.getcwd())
    merged["temp_scope"] = _normalize_scope(merged["temp_scope"], warnings, strict)

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_positive_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Coerce worker counts and similar limits into positive integers."""
    if value is None:
        return fallback
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value

    if not strict and isinstance(value, str) and value.strip().isdigit() and int(value) > 0:
        warnings.append(f"Field '{field}' converted from '{value}' to int.")
        return int(value)

    msg = f"Invalid field '{field}': expected positive int, received {value!r}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_choice(
        value: Any,
        fallback: str,
        choices: Tuple[str, ...],
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Validate an enumerated string field (case-insensitive)."""
    if value is None:
        return fallback
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()

    msg = f"Invalid field '{field}': expected one of {', '.join(choices)}, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_project_list(value: Any, warnings: List[str], strict: bool) -> List[Dict[str, str]]:
    """Ensure 'projects' is a list of {packageName, projectFolder} entries."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"Invalid field 'projects': expected list, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using empty project list.")
        return []

    out: List[Dict[str, str]] = []
    for i, item in enumerate(value):
        name = item.get("packageName") if isinstance(item, dict) else None
        folder = item.get("projectFolder") if isinstance(item, dict) else None
        if isinstance(name, str) and name.strip() and isinstance(folder, str) and folder.strip():
            out.append({"packageName": name.strip(), "projectFolder": folder.strip()})
            continue

        msg = f"Invalid item in 'projects[{i}]': expected packageName and projectFolder strings."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Item discarded.")
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: DOMAIN NORMALIZATION
# -----------------------------------------------------------------------------

def _normalize_scope(scope: str, warnings: List[str], strict: bool) -> str:
    """Ensure the temp scope is an '@'-prefixed npm scope without slashes."""
    s = scope.strip().rstrip("/")
    if not s.startswith("@"):
        if strict:
            raise ValueError(f"Invalid temp scope '{scope}': must start with '@'.")
        warnings.append(f"Temp scope '{scope}' corrected to '@{s}'.")
        s = "@" + s
    if "/" in s or len(s) < 2:
        if strict:
            raise ValueError(f"Invalid temp scope '{scope}'.")
        warnings.append(f"Invalid temp scope '{scope}'. Using fallback.")
        return const.DEFAULT_TEMP_SCOPE
    return s
