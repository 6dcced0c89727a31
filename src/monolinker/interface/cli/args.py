from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates raw argparse
namespaces into configuration overrides.
"""

import argparse
from typing import Any, Dict

from monolinker.domain import constants as const

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the monolinker CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="monolinker",
        description="Link the local projects of a monorepo against the output of an installation backend.",
    )

    # --- Workspace Layout ---
    p.add_argument(
        "-w", "--workspace",
        dest="workspace_root",
        help="Workspace root containing monolinker.json (default: current directory).",
        default=None,
    )
    p.add_argument(
        "--strategy",
        choices=list(const.SUPPORTED_STRATEGIES),
        default=None,
        help="Layout produced by the installation backend.",
    )
    p.add_argument(
        "--temp-folder",
        dest="common_temp_folder",
        default=None,
        help="Common temp folder used by the backend, relative to the workspace root.",
    )

    # --- Runtime Behavior ---
    p.add_argument(
        "--force",
        action="store_true",
        help="Relink even if the link manifest already exists.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Build and validate every tree without touching disk.",
    )
    p.add_argument(
        "--max-workers",
        dest="max_workers",
        type=int,
        default=None,
        help="Maximum number of projects linked in parallel.",
    )
    p.add_argument(
        "--print-tree",
        action="store_true",
        help="Print the dependency tree of every project.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore monolinker.json values except the project list.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the merged configuration and exit.",
    )
    p.add_argument(
        "--save-config",
        action="store_true",
        help="Write the merged configuration to monolinker.json before linking.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--save-log",
        action="store_true",
        help="Also write logs to a rotating file.",
    )

    # --- Format Selection ---
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run result as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into a configuration dictionary.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["workspace_root"] = args.workspace_root
    overrides["strategy"] = args.strategy
    overrides["common_temp_folder"] = args.common_temp_folder
    overrides["max_workers"] = args.max_workers

    if args.force:
        overrides["force"] = True
    if args.dry_run:
        overrides["dry_run"] = True
    if args.print_tree:
        overrides["debug_tree"] = True
    if args.save_log:
        overrides["save_log"] = True

    return overrides
