from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, loading and merging
of configuration sources (defaults, workspace file and CLI overrides), the
linking run and result rendering.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from monolinker.core.engine import run_linking
from monolinker.core.validator import validate_config
from monolinker.domain.config import get_config_path, get_default_config, load_config, save_config
from monolinker.domain.errors import ConfigurationError
from monolinker.domain.link_models import LinkRunResult
from monolinker.infra.logging import (
    configure_logging,
    get_default_log_path,
    get_logger,
    logging_config_from_run,
)
from monolinker.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 if a project failed to link, 2 on configuration
        errors, 130 when interrupted.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Resolve base configuration (defaults vs workspace file)
    file_conf = load_config(args.workspace_root)
    if args.use_defaults:
        base_conf = get_default_config(file_conf["workspace_root"])
        base_conf["projects"] = file_conf.get("projects", [])
    else:
        base_conf = file_conf

    # 3. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf, overrides)

    # 4. Logging bootstrap (console on stderr, optional rotating file)
    configure_logging(logging_config_from_run(
        raw_conf, debug=args.debug, default_log_file=get_default_log_path()
    ))

    logger.debug("CLI execution initiated. Configuration hierarchy resolved.")

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Short-circuit if configuration dump is requested
    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if args.save_config:
        save_config(clean_conf)
        logger.info(f"Configuration saved to {get_config_path(clean_conf['workspace_root'])}")

    # 6. Linking phase
    logger.info(f"Targeting workspace: {clean_conf['workspace_root']}")
    try:
        result = run_linking(clean_conf)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        msg = "Linking interrupted by user."
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130
    except Exception as e:
        msg = f"Linking failed unexpectedly: {e}"
        logger.critical(msg, exc_info=True)
        print(f"ERROR: {msg}", file=sys.stderr)
        return 1

    # 7. Output rendering phase
    if args.json_output:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, print_tree=bool(clean_conf.get("debug_tree")))

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys with non-None values are merged.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    keys_to_merge = [
        "workspace_root", "strategy", "common_temp_folder", "max_workers",
        "force", "dry_run", "debug_tree", "save_log",
    ]
    for k in keys_to_merge:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: LinkRunResult, *, print_tree: bool = False) -> None:
    """
    Format and print the run result to the standard output.

    Args:
        result: The linking result to render.
        print_tree: Also print every project's rendered dependency tree.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        for failure in result.failures:
            print(f"  - {failure.project}: [{failure.error_type}] {failure.message}", file=sys.stderr)
        return

    if result.skipped:
        print("Linking skipped: everything is already up to date (use --force to relink).")
        return

    if result.dry_run:
        print("DRY RUN: no changes were made.")
    else:
        print(f"SUCCESS: linked {len(result.entries)} project(s) with the {result.strategy} strategy.")
        if result.manifest_written:
            print(f"Link manifest: {result.link_manifest_path}")

    local_links = result.local_links
    if local_links:
        print("\nLocal links:")
        for project, deps in local_links.items():
            print(f"  - {project}: {', '.join(deps)}")

    if print_tree or result.dry_run:
        for entry in result.entries:
            if entry.tree_lines:
                print("")
                for line in entry.tree_lines:
                    print(line)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
