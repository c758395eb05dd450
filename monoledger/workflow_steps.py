"""Helpers for script-based GitHub Actions workflow steps."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from monoledger.errors import MonoledgerError
from monoledger.pipeline import complete_release, plan_release


def _write_output(output_path: str, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


def plan(branch: str, github_output: str, root: Path | None = None) -> None:
    """Resolve the branch's changes and emit GitHub step outputs."""
    release = plan_release(root or Path.cwd(), branch)
    if not release.plan:
        raise SystemExit(f"Nothing to release on {branch}.")

    versions = {name: bump.new for name, bump in release.versions.items()}
    _write_output(github_output, "packages", json.dumps(list(release.plan)))
    _write_output(github_output, "deploy", json.dumps(release.deploy_targets))
    _write_output(
        github_output, "plan", release.plan.model_dump_json(exclude_none=True)
    )
    _write_output(github_output, "versions", json.dumps(versions))


def clear(branch: str, root: Path | None = None) -> None:
    """Remove the branch from the ledger after the apply job succeeded."""
    complete_release(root or Path.cwd(), branch)


def main(argv: list[str] | None = None) -> None:
    """Run a workflow step command."""
    args = argv if argv is not None else sys.argv[1:]
    parser = argparse.ArgumentParser(prog="python -m monoledger.workflow_steps")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan")
    plan_parser.add_argument("--branch", required=True, help="Branch to resolve.")
    plan_parser.add_argument(
        "--github-output", required=True, help="Path to GitHub step output file."
    )

    clear_parser = subparsers.add_parser("clear")
    clear_parser.add_argument("--branch", required=True, help="Branch to clear.")

    parsed = parser.parse_args(args)
    try:
        if parsed.command == "plan":
            plan(parsed.branch, parsed.github_output)
        elif parsed.command == "clear":
            clear(parsed.branch)
    except MonoledgerError as exc:
        raise SystemExit(f"ERROR: {exc}") from exc


if __name__ == "__main__":
    main()
