"""Data models for monoledger.

These Pydantic models represent the workspace snapshot, the persisted change
ledger, and the resolved bump plan.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, RootModel

from .bumps import BumpKind

DEFAULT_MESSAGE = "chore(release): |---| release new version"
DEFAULT_GIT_USER_NAME = "github-actions[bot]"
DEFAULT_GIT_USER_EMAIL = "github-actions[bot]@users.noreply.github.com"


class WorkspacePackage(BaseModel):
    """A package in the workspace snapshot.

    Attributes:
        name: Unique package name.
        internal_dependencies: Names of other workspace packages this one
            depends on, in declaration order.
        path: Relative path from workspace root to the package directory.
        version: Current version string from the package manifest.
    """

    name: str
    internal_dependencies: list[str] = Field(default_factory=list)
    path: str = "."
    version: str = "0.0.0"


class Change(BaseModel):
    """A directly requested version intent for one package.

    Two changes are equal when both package and bump kind match.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    package: str
    release_as: BumpKind = Field(alias="releaseAs")


class BranchChangeSet(BaseModel):
    """Pending changes recorded against a single branch.

    Attributes:
        deploy_targets: Free-form deployment labels, passed through untouched.
        changes: Changes in the order they were recorded.
    """

    model_config = ConfigDict(populate_by_name=True)

    deploy_targets: list[str] = Field(default_factory=list, alias="deploy")
    changes: list[Change] = Field(default_factory=list, alias="pkgs")

    def find(self, package: str) -> Change | None:
        """Return the first change recorded for package, if any."""
        return next((c for c in self.changes if c.package == package), None)


class ChangeLedger(BaseModel):
    """The persisted ledger document: branch name → change set.

    The commit metadata fields are seeded from configuration when the ledger
    is created and carried along for the external release step.
    """

    message: str | None = DEFAULT_MESSAGE
    git_user_name: str | None = DEFAULT_GIT_USER_NAME
    git_user_email: str | None = DEFAULT_GIT_USER_EMAIL
    changes: dict[str, BranchChangeSet] = Field(default_factory=dict)


class Origin(str, Enum):
    """Why a package appears in a bump plan."""

    DIRECT = "direct"
    INHERITED = "inherited"


class PlanEntry(BaseModel):
    """The resolved bump for one package.

    Attributes:
        kind: Severity or channel to apply.
        origin: Direct when requested in the ledger, inherited when it was
            cascaded from a dependency.
        identity: Build identifier shared by every package on the same
            channel within one resolution. None for severity bumps.
    """

    kind: BumpKind
    origin: Origin
    identity: str | None = None


class BumpPlan(RootModel[dict[str, PlanEntry]]):
    """Package name → resolved bump, for every affected package."""

    root: dict[str, PlanEntry] = Field(default_factory=dict)

    def __getitem__(self, name: str) -> PlanEntry:
        return self.root[name]

    def __contains__(self, name: object) -> bool:
        return name in self.root

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def get(self, name: str) -> PlanEntry | None:
        return self.root.get(name)

    def items(self):
        return self.root.items()


class VersionBump(BaseModel):
    """Records a version change for a package.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
    """

    old: str
    new: str


class ReleasePlan(BaseModel):
    """A resolved plan for one branch, ready for the apply step.

    Attributes:
        branch: Branch whose changes were resolved.
        deploy_targets: Deployment labels recorded on the branch.
        plan: Resolved bump for every affected package.
        versions: Current and next version for every package in the plan.
    """

    branch: str
    deploy_targets: list[str] = Field(default_factory=list)
    plan: BumpPlan = Field(default_factory=BumpPlan)
    versions: dict[str, VersionBump] = Field(default_factory=dict)
