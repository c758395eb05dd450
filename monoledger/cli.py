"""CLI entry point for monoledger."""

from __future__ import annotations

import argparse
import sys
from contextlib import redirect_stdout
from importlib.metadata import version as pkg_version
from pathlib import Path

from monoledger.bumps import BUMP_KINDS, parse_bump_kind
from monoledger.config import LedgerConfig, load_config, open_ledger
from monoledger.errors import MonoledgerError
from monoledger.models import Change
from monoledger.pipeline import current_branch, plan_release
from monoledger.shell import fatal

__version__ = pkg_version("monoledger")


def _root(args: argparse.Namespace) -> Path:
    return Path(args.root).resolve()


def _branch(args: argparse.Namespace, root: Path, config: LedgerConfig) -> str:
    return args.branch or current_branch(root, config.default_branch)


def cmd_init(args: argparse.Namespace) -> None:
    """Create the change ledger if it does not exist yet."""
    root = _root(args)
    store = open_ledger(root)
    existed = store.exists()
    ledger = store.initialize()
    rel = store.path.relative_to(root)
    if existed:
        print(f"✓ {rel} already exists ({len(ledger.changes)} branches)")
    else:
        print(f"✓ Created {rel}")

    lock_rel = store.lock_path.relative_to(root).as_posix()
    gitignore = root / ".gitignore"
    ignored = gitignore.exists() and lock_rel in gitignore.read_text().split()
    if not ignored:
        print(f"  Add {lock_rel} to .gitignore (ledger lock file)")


def cmd_add(args: argparse.Namespace) -> None:
    """Record a change for a package on the current branch."""
    root = _root(args)
    config = load_config(root)
    branch = _branch(args, root, config)
    change = Change(package=args.package, release_as=parse_bump_kind(args.release_as))

    added = open_ledger(root, config).add_change(change, args.deploy or [], branch)
    summary = f"{change.package}: {change.release_as.value}"
    if added:
        print(f"✓ {summary} on {branch}")
    else:
        print(f"  {summary} already recorded on {branch}")


def cmd_remove(args: argparse.Namespace) -> None:
    """Clear every change recorded on a branch."""
    root = _root(args)
    config = load_config(root)
    branch = _branch(args, root, config)
    if open_ledger(root, config).remove_change(branch):
        print(f"✓ Cleared changes for {branch}")
    else:
        print(f"  No changes recorded for {branch}")


def cmd_list(args: argparse.Namespace) -> None:
    """Print the recorded changes, for one branch or all of them."""
    root = _root(args)
    ledger = open_ledger(root).get_changes()
    branches = [args.branch] if args.branch else sorted(ledger.changes)
    if not branches:
        print("No changes recorded")
        return

    for branch in branches:
        entry = ledger.changes.get(branch)
        if entry is None:
            print(f"{branch}: no changes recorded")
            continue
        deploy = ", ".join(entry.deploy_targets)
        deploy = f" (deploy: {deploy})" if deploy else ""
        print(f"{branch}{deploy}")
        for change in entry.changes:
            print(f"  {change.package}: {change.release_as.value}")


def cmd_exists(args: argparse.Namespace) -> None:
    """Exit 0 if the package has a change on the branch, 1 otherwise."""
    root = _root(args)
    config = load_config(root)
    branch = _branch(args, root, config)
    found = open_ledger(root, config).change_exists(branch, args.package)
    print(f"{args.package}: {'recorded' if found else 'not recorded'} on {branch}")
    sys.exit(0 if found else 1)


def cmd_plan(args: argparse.Namespace) -> None:
    """Resolve the branch's changes into a bump plan."""
    root = _root(args)
    config = load_config(root)
    branch = _branch(args, root, config)
    sync = False if args.no_sync else None

    if args.json:
        # Keep stdout clean for the JSON document
        with redirect_stdout(sys.stderr):
            release = plan_release(root, branch, sync=sync)
        print(release.model_dump_json(indent=2))
        return

    release = plan_release(root, branch, sync=sync)
    if release.deploy_targets:
        print(f"\nDeploy to: {', '.join(release.deploy_targets)}")


def cli(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="monoledger",
        description="Branch-scoped change ledger and bump planner for monorepos.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-C",
        "--root",
        default=".",
        help="Workspace root directory. (default: current directory)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create the change ledger.")
    init_parser.set_defaults(func=cmd_init)

    add_parser = subparsers.add_parser("add", help="Record a change for a package.")
    add_parser.add_argument("package", help="Workspace package name.")
    add_parser.add_argument(
        "-r",
        "--release-as",
        required=True,
        choices=BUMP_KINDS,
        help="Bump kind to release the package as.",
    )
    add_parser.add_argument(
        "-d",
        "--deploy",
        action="append",
        metavar="TARGET",
        help="Deployment target for the branch (repeatable).",
    )
    add_parser.add_argument(
        "-b", "--branch", default=None, help="Branch to record on. (default: current)"
    )
    add_parser.set_defaults(func=cmd_add)

    remove_parser = subparsers.add_parser(
        "remove", help="Clear every change recorded on a branch."
    )
    remove_parser.add_argument(
        "-b", "--branch", default=None, help="Branch to clear. (default: current)"
    )
    remove_parser.set_defaults(func=cmd_remove)

    list_parser = subparsers.add_parser("list", help="Show recorded changes.")
    list_parser.add_argument(
        "-b", "--branch", default=None, help="Only show this branch."
    )
    list_parser.set_defaults(func=cmd_list)

    exists_parser = subparsers.add_parser(
        "exists", help="Check whether a package has a recorded change."
    )
    exists_parser.add_argument("package", help="Workspace package name.")
    exists_parser.add_argument(
        "-b", "--branch", default=None, help="Branch to check. (default: current)"
    )
    exists_parser.set_defaults(func=cmd_exists)

    plan_parser = subparsers.add_parser(
        "plan", help="Resolve recorded changes into a bump plan."
    )
    plan_parser.add_argument(
        "-b", "--branch", default=None, help="Branch to resolve. (default: current)"
    )
    plan_parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Do not cascade bumps to dependent packages.",
    )
    plan_parser.add_argument(
        "--json", action="store_true", help="Print the plan as JSON."
    )
    plan_parser.set_defaults(func=cmd_plan)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except MonoledgerError as exc:
        fatal(str(exc))
