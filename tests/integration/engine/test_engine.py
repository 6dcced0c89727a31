from __future__ import annotations

"""
Integration tests for the linking engine.

Runs complete linking passes over workspaces laid out under tmp_path with
both backend layouts.

Verifies:
1. The a/b/lodash scenario for both strategies.
2. Repeated runs produce identical disk state and manifest.
3. Configuration errors abort before linking; project failures suppress the manifest.
4. Dry runs and the already-linked skip leave the disk untouched.
"""

import json
import os
from pathlib import Path

import pytest

from monolinker.core.engine import run_linking
from monolinker.domain.errors import ConfigurationError, FilesystemConflictError
from monolinker.infra.symlinks import is_link, read_link_once


def _snapshot(folder: Path) -> dict:
    """Map every path under folder to its link target (or None for real entries)."""
    state = {}
    for current, dirs, files in os.walk(str(folder)):
        for name in dirs + files:
            full = os.path.join(current, name)
            state[os.path.relpath(full, str(folder))] = read_link_once(full) if is_link(full) else None
    return state


# -----------------------------------------------------------------------------
# END-TO-END SCENARIOS
# -----------------------------------------------------------------------------

def test_nested_end_to_end(nested_workspace) -> None:
    """TC-01: 'a' links to 'b' and to the backend's lodash@1.0.0."""
    result = run_linking(nested_workspace.config("nested"))

    assert result.ok, result.error
    assert result.manifest_written is True
    a_modules = nested_workspace.root / "projects" / "a" / "node_modules"
    assert read_link_once(str(a_modules / "b")) == str(nested_workspace.root / "projects" / "b")
    assert read_link_once(str(a_modules / "lodash")) == str(nested_workspace.node_modules / "lodash")
    assert (a_modules / "lodash" / "package.json").exists()

    manifest = json.loads(nested_workspace.link_manifest.read_text(encoding="utf-8"))
    assert manifest == {"localLinks": {"a": ["b"]}}
    assert result.local_links == {"a": ["b"]}


def test_flattened_end_to_end(flattened_workspace) -> None:
    """TC-02: lodash reaches the shared store location in one hop."""
    result = run_linking(flattened_workspace.config("flattened"))

    assert result.ok, result.error
    a_modules = flattened_workspace.root / "projects" / "a" / "node_modules"
    store = flattened_workspace.node_modules / ".store" / "lodash@1.0.0" / "node_modules" / "lodash"
    assert read_link_once(str(a_modules / "lodash")) == str(store)
    assert read_link_once(str(a_modules / "b")) == str(flattened_workspace.root / "projects" / "b")
    assert json.loads(flattened_workspace.link_manifest.read_text(encoding="utf-8")) == {"localLinks": {"a": ["b"]}}


def test_nested_staging_folders_are_materialized(workspace) -> None:
    """TC-03: Packages with their own dependencies see their nested versions."""
    workspace.add_project("a")
    workspace.add_staging_manifest("a", dependencies={"lodash": "1.0.0", "x": "1.0.0"})
    workspace.install_hoisted("lodash", "1.0.0")
    x = workspace.install_hoisted("x", "1.0.0", {"lodash": "^2.0.0"})
    nested_lodash = workspace.install(x, "lodash", "2.0.0")

    result = run_linking(workspace.config("nested"))

    assert result.ok, result.error
    a_modules = workspace.root / "projects" / "a" / "node_modules"
    staging = workspace.temp / "linked-deps" / "x@1.0.0"
    assert read_link_once(str(a_modules / "x")) == str(staging)
    assert read_link_once(str(staging / "node_modules" / "lodash")) == str(nested_lodash)
    assert json.loads((a_modules / "lodash" / "package.json").read_text(encoding="utf-8"))["version"] == "1.0.0"
    assert json.loads(
        (a_modules / "x" / "node_modules" / "lodash" / "package.json").read_text(encoding="utf-8")
    )["version"] == "2.0.0"
    assert (a_modules / "x" / "index.js").exists()


def test_repeated_runs_are_idempotent(nested_workspace) -> None:
    """TC-04: A forced second run yields the same links and manifest bytes."""
    assert run_linking(nested_workspace.config("nested")).ok
    first_state = _snapshot(nested_workspace.root / "projects")
    first_manifest = nested_workspace.link_manifest.read_bytes()

    result = run_linking(nested_workspace.config("nested"), force=True)

    assert result.ok
    assert _snapshot(nested_workspace.root / "projects") == first_state
    assert nested_workspace.link_manifest.read_bytes() == first_manifest


def test_run_is_skipped_when_already_linked(nested_workspace) -> None:
    """TC-05: An existing manifest short-circuits the run unless forced."""
    nested_workspace.link_manifest.parent.mkdir(parents=True, exist_ok=True)
    nested_workspace.link_manifest.write_text('{"localLinks": {}}\n', encoding="utf-8")

    result = run_linking(nested_workspace.config("nested"))

    assert result.ok and result.skipped
    assert not (nested_workspace.root / "projects" / "a" / "node_modules").exists()

    forced = run_linking(nested_workspace.config("nested", force=True))
    assert forced.ok and not forced.skipped
    assert (nested_workspace.root / "projects" / "a" / "node_modules" / "b").exists()


def test_dry_run_writes_nothing(nested_workspace) -> None:
    """TC-06: Trees are built and rendered; no links or manifest appear."""
    result = run_linking(nested_workspace.config("nested"), dry_run=True)

    assert result.ok and result.dry_run
    assert result.manifest_written is False
    assert not nested_workspace.link_manifest.exists()
    assert not (nested_workspace.root / "projects" / "a" / "node_modules").exists()
    assert result.entries[0].tree_lines[0] == "a@1.0.0 [project]"


# -----------------------------------------------------------------------------
# FAILURE SCENARIOS
# -----------------------------------------------------------------------------

def test_unknown_internal_dependency_aborts_before_linking(nested_workspace) -> None:
    """TC-07: A ConfigurationError is raised and no manifest is written."""
    nested_workspace.add_staging_manifest("a", dependencies={"lodash": "1.0.0"}, internal={"ghost": "1.0.0"})

    with pytest.raises(ConfigurationError) as exc_info:
        run_linking(nested_workspace.config("nested"))

    assert exc_info.value.dependency == "ghost"
    assert not nested_workspace.link_manifest.exists()
    assert not (nested_workspace.root / "projects" / "a" / "node_modules").exists()


def test_empty_project_list_is_configuration_error(workspace) -> None:
    with pytest.raises(ConfigurationError, match="No local projects"):
        run_linking(workspace.config("nested"))


def test_project_failure_suppresses_manifest(nested_workspace) -> None:
    """TC-08: One failing project fails the run; the others keep their links."""
    nested_workspace.add_staging_manifest("b", dependencies={"missing-dep": "1.0.0"})

    result = run_linking(nested_workspace.config("nested"))

    assert result.ok is False
    assert [f.project for f in result.failures] == ["b"]
    assert result.failures[0].error_type == "MissingDependencyError"
    assert result.failures[0].dependency == "missing-dep"
    assert not nested_workspace.link_manifest.exists()
    assert is_link(str(nested_workspace.root / "projects" / "a" / "node_modules" / "lodash"))


def test_filesystem_conflict_is_reported_and_nothing_deleted(nested_workspace) -> None:
    """TC-09: Real content in a project's node_modules is preserved."""
    occupied = nested_workspace.root / "projects" / "a" / "node_modules" / "lodash"
    occupied.mkdir(parents=True)
    (occupied / "patched.js").write_text("local patch", encoding="utf-8")

    result = run_linking(nested_workspace.config("nested"))

    assert result.ok is False
    failure = result.failures[0]
    assert failure.project == "a"
    assert isinstance(failure.error, FilesystemConflictError)
    assert failure.error.path == str(occupied)
    assert (occupied / "patched.js").read_text(encoding="utf-8") == "local patch"
    assert not nested_workspace.link_manifest.exists()


def test_flattened_backend_violation_is_reported(flattened_workspace) -> None:
    flattened_workspace.add_staging_manifest("b", dependencies={"react": "18.0.0"})

    result = run_linking(flattened_workspace.config("flattened", max_workers=1))

    assert result.ok is False
    assert result.failures[0].error_type == "BackendInvariantViolationError"
    assert result.failures[0].dependency == "react"
    assert [e.project for e in result.entries] == ["a"]


def test_missing_nested_dependency_fails_every_project_that_needs_it(workspace) -> None:
    """TC-10: A package whose own dependency is missing is never reused by a later project."""
    for name in ("a", "b"):
        workspace.add_project(name)
        workspace.add_staging_manifest(name, dependencies={"x": "1.0.0"})
    workspace.install_hoisted("x", "1.0.0", {"y": "^1.0.0"})

    result = run_linking(workspace.config("nested", max_workers=1))

    assert result.ok is False
    assert [f.project for f in result.failures] == ["a", "b"]
    assert all(f.dependency == "x > y" for f in result.failures)
    assert result.entries == []
    for name in ("a", "b"):
        assert not os.path.lexists(str(workspace.root / "projects" / name / "node_modules" / "x"))
    assert not workspace.link_manifest.exists()


def test_unreadable_manifest_does_not_skip_the_run(nested_workspace) -> None:
    """TC-11: Only a readable link manifest means the workspace is already linked."""
    nested_workspace.link_manifest.parent.mkdir(parents=True, exist_ok=True)
    nested_workspace.link_manifest.write_text("{truncated", encoding="utf-8")

    result = run_linking(nested_workspace.config("nested"))

    assert result.ok and not result.skipped
    assert result.manifest_written is True
    assert json.loads(nested_workspace.link_manifest.read_text(encoding="utf-8")) == {"localLinks": {"a": ["b"]}}


def test_flattened_projects_share_one_physical_copy(flattened_workspace) -> None:
    """TC-12: Two projects depending on lodash@1.0.0 reach the same store folder in one hop."""
    flattened_workspace.add_project("c", dependencies={"lodash": "1.0.0"})
    flattened_workspace.add_staging_manifest("c", dependencies={"lodash": "1.0.0"})
    store = flattened_workspace.node_modules / ".store" / "lodash@1.0.0" / "node_modules" / "lodash"
    flattened_workspace.link_flattened("c", "lodash", store, relative=False)

    result = run_linking(flattened_workspace.config("flattened"))

    assert result.ok, result.error
    projects = flattened_workspace.root / "projects"
    a_link = read_link_once(str(projects / "a" / "node_modules" / "lodash"))
    c_link = read_link_once(str(projects / "c" / "node_modules" / "lodash"))
    assert a_link == c_link == str(store)


def test_nested_versions_of_one_package_stay_separate_across_projects(workspace) -> None:
    """TC-13: Projects on different versions of a package get independent subtrees."""
    workspace.add_project("a")
    workspace.add_staging_manifest("a", dependencies={"lodash": "1.0.0"})
    workspace.add_project("c")
    workspace.add_staging_manifest("c", dependencies={"lodash": "2.0.0"})

    workspace.install_hoisted("lodash", "1.0.0", {"util": "^1.0.0"})
    workspace.install_hoisted("util", "1.0.0")
    lodash_2 = workspace.install(workspace.staging_install("c"), "lodash", "2.0.0", {"util": "^2.0.0"})
    workspace.install(lodash_2, "util", "2.0.0")

    result = run_linking(workspace.config("nested"))

    assert result.ok, result.error
    projects = workspace.root / "projects"
    staging_root = workspace.temp / "linked-deps"
    assert read_link_once(str(projects / "a" / "node_modules" / "lodash")) == str(staging_root / "lodash@1.0.0")
    assert read_link_once(str(projects / "c" / "node_modules" / "lodash")) == str(staging_root / "lodash@2.0.0")

    def version(path: Path) -> str:
        return json.loads((path / "package.json").read_text(encoding="utf-8"))["version"]

    assert version(projects / "a" / "node_modules" / "lodash") == "1.0.0"
    assert version(projects / "a" / "node_modules" / "lodash" / "node_modules" / "util") == "1.0.0"
    assert version(projects / "c" / "node_modules" / "lodash") == "2.0.0"
    assert version(projects / "c" / "node_modules" / "lodash" / "node_modules" / "util") == "2.0.0"
