"""Release planning pipeline: discover → graph → ledger → resolve → versions.

This module wires the ledger and the resolver to a real workspace:
1. Discover all packages in the uv workspace
2. Build the dependency graph
3. Load the changes recorded on the branch
4. Resolve them into a bump plan
5. Compute the next version of every planned package

Applying the plan (writing versions, tagging, changelogs) is left to the
caller. Once that succeeded, ``complete_release`` clears the branch.
"""

from __future__ import annotations

import glob
from pathlib import Path

from .config import load_config, open_ledger
from .errors import WorkspaceError
from .graph import build_graph
from .models import BumpPlan, ReleasePlan, VersionBump, WorkspacePackage
from .resolver import resolve
from .shell import git, step
from .toml import (
    dep_canonical_name,
    get_all_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    load_pyproject,
)
from .versions import bump_version


def discover_packages(root: Path) -> list[WorkspacePackage]:
    """Scan the workspace and discover all packages.

    Reads [tool.uv.workspace].members from root pyproject.toml to find
    package directories, then extracts name, version, and internal deps
    from each package's pyproject.toml.

    Returns:
        Packages in member-glob order.

    Raises:
        WorkspaceError: If the root manifest is missing or no package matches.
    """
    step("Discovering workspace packages")

    root_manifest = root / "pyproject.toml"
    if not root_manifest.exists():
        raise WorkspaceError(f"No pyproject.toml found in {root}")
    member_globs = get_workspace_member_globs(load_pyproject(root_manifest))

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists() and p not in member_dirs:
                member_dirs.append(p)

    if not member_dirs:
        raise WorkspaceError("No packages found matching workspace members")

    # First pass: collect basic info from each package
    packages: list[WorkspacePackage] = []
    raw_deps: dict[str, list[str]] = {}
    for d in member_dirs:
        doc = load_pyproject(d / "pyproject.toml")
        name = get_project_name(doc, d.name)
        packages.append(
            WorkspacePackage(
                name=name,
                path=d.relative_to(root).as_posix(),
                version=get_project_version(doc),
            )
        )
        raw_deps[name] = get_all_dependency_strings(doc)

    # Second pass: keep only deps that are workspace packages
    workspace_names = {p.name for p in packages}
    for pkg in packages:
        for dep_str in raw_deps[pkg.name]:
            dep_name = dep_canonical_name(dep_str)
            if dep_name in pkg.internal_dependencies:
                continue
            if dep_name in workspace_names:
                pkg.internal_dependencies.append(dep_name)

    for pkg in packages:
        deps = ", ".join(pkg.internal_dependencies)
        deps = f" → [{deps}]" if deps else ""
        print(f"  {pkg.name} {pkg.version} ({pkg.path}){deps}")

    return packages


def current_branch(root: Path, default: str = "main") -> str:
    """Return the checked-out branch, or default when git can't tell."""
    try:
        branch = git("rev-parse", "--abbrev-ref", "HEAD", cwd=root, check=False)
    except OSError:
        return default
    if not branch or branch == "HEAD":
        return default
    return branch


def plan_versions(
    plan: BumpPlan, packages: list[WorkspacePackage]
) -> dict[str, VersionBump]:
    """Compute the next version for every package in the plan.

    Raises:
        WorkspaceError: If a planned package has an invalid current version.
    """
    current = {p.name: p.version for p in packages}
    versions: dict[str, VersionBump] = {}
    for name, entry in plan.items():
        try:
            new = bump_version(current[name], entry.kind, entry.identity)
        except WorkspaceError as exc:
            raise WorkspaceError(f"{name}: {exc}") from exc
        versions[name] = VersionBump(old=current[name], new=new)
    return versions


def plan_release(root: Path, branch: str, *, sync: bool | None = None) -> ReleasePlan:
    """Resolve the changes recorded on branch into a release plan.

    Args:
        root: Workspace root directory.
        branch: Branch whose ledger entry is resolved.
        sync: Cascade bumps to dependents. Defaults to the configured
              ``sync-deps`` setting.

    Returns:
        The release plan. Empty when nothing is recorded on the branch.

    Raises:
        WorkspaceError, StorageError, CycleError, UnknownPackageError.
    """
    config = load_config(root)
    if sync is None:
        sync = config.sync_deps

    packages = discover_packages(root)
    graph = build_graph(packages)
    for name, deps in graph.external.items():
        print(f"  Warning: {name} depends on unknown packages: {', '.join(deps)}")

    step(f"Resolving changes for {branch}")
    change_set = open_ledger(root, config).get_changes_by_branch(branch)
    if change_set is None or not change_set.changes:
        print("  No changes recorded")
        return ReleasePlan(branch=branch)

    plan = resolve(graph, change_set.changes, sync=sync)
    versions = plan_versions(plan, packages)
    for name, entry in plan.items():
        bump = versions[name]
        kind, origin = entry.kind.value, entry.origin.value
        print(f"  {name}: {bump.old} → {bump.new} ({kind}, {origin})")

    return ReleasePlan(
        branch=branch,
        deploy_targets=list(change_set.deploy_targets),
        plan=plan,
        versions=versions,
    )


def complete_release(root: Path, branch: str) -> bool:
    """Clear branch from the ledger once its plan has been applied.

    Only call this after the apply step succeeded; until then the branch
    entry stays in place and can be resolved again.
    """
    step(f"Clearing changes for {branch}")
    removed = open_ledger(root).remove_change(branch)
    print("  Removed" if removed else "  Nothing recorded")
    return removed
