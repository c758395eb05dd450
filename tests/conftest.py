"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from monoledger.ledger import ChangeLedgerStore
from monoledger.models import WorkspacePackage


def write_package(
    root: Path, name: str, version: str = "1.0.0", deps: list[str] | None = None
) -> Path:
    """Write packages/<name>/pyproject.toml and return the package dir."""
    package_dir = root / "packages" / name
    package_dir.mkdir(parents=True)
    dep_lines = "".join(f'    "{d}",\n' for d in deps or [])
    (package_dir / "pyproject.toml").write_text(
        f'[project]\nname = "{name}"\nversion = "{version}"\n'
        f"dependencies = [\n{dep_lines}]\n"
    )
    return package_dir


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A uv workspace: pkg-c → pkg-b → pkg-a, pkg-d standalone."""
    (tmp_path / "pyproject.toml").write_text(
        '[tool.uv.workspace]\nmembers = ["packages/*"]\n'
    )
    write_package(tmp_path, "pkg-a", "1.0.0", ["requests>=2.0"])
    write_package(tmp_path, "pkg-b", "2.1.0", ["pkg-a>=1.0"])
    write_package(tmp_path, "pkg-c", "0.3.4", ["pkg_b", "pkg-a"])
    write_package(tmp_path, "pkg-d", "1.0")
    return tmp_path


@pytest.fixture
def store(tmp_path: Path) -> ChangeLedgerStore:
    """Ledger store rooted in an empty temp directory."""
    return ChangeLedgerStore(tmp_path)


@pytest.fixture
def chain_packages() -> list[WorkspacePackage]:
    """A (no deps) ← B ← C."""
    return [
        WorkspacePackage(name="A"),
        WorkspacePackage(name="B", internal_dependencies=["A"]),
        WorkspacePackage(name="C", internal_dependencies=["B"]),
    ]
