"""Exception types raised by monoledger.

Every failure is terminal for the operation in progress and is raised to the
caller; nothing is retried or logged here. The CLI turns these into an
``ERROR:`` line and a non-zero exit code.
"""

from __future__ import annotations

from pathlib import Path


class MonoledgerError(Exception):
    """Base class for all monoledger errors."""


class StorageError(MonoledgerError):
    """The change ledger could not be read, written, or locked.

    No partial state is committed when this is raised.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(f"{message} ({path})" if path else message)
        self.path = path


class CycleError(MonoledgerError):
    """The workspace dependency graph contains a cycle.

    Attributes:
        cycle: Package names along the cycle, first name repeated at the end.
    """

    def __init__(self, cycle: list[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = cycle


class UnknownPackageError(MonoledgerError):
    """A recorded change targets a package missing from the workspace."""

    def __init__(self, packages: list[str]) -> None:
        names = ", ".join(packages)
        super().__init__(f"Changes reference packages not in the workspace: {names}")
        self.packages = packages


class WorkspaceError(MonoledgerError):
    """Workspace layout or configuration could not be read."""
