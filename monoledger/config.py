"""Workspace configuration.

Settings come from the ``[tool.monoledger]`` table of the workspace root
pyproject.toml. Keys use kebab-case:

    [tool.monoledger]
    ledger-file = ".changes.json"
    sync-deps = true
    lock-timeout = 10.0
    default-branch = "main"
    message = "chore(release): |---| release new version"
    git-user-name = "github-actions[bot]"
    git-user-email = "github-actions[bot]@users.noreply.github.com"

Every key is optional; a workspace without the table uses the defaults.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import WorkspaceError
from .ledger import DEFAULT_LOCK_TIMEOUT, LEDGER_FILE, ChangeLedgerStore
from .models import (
    DEFAULT_GIT_USER_EMAIL,
    DEFAULT_GIT_USER_NAME,
    DEFAULT_MESSAGE,
    ChangeLedger,
)
from .toml import get_tool_table, load_pyproject


class LedgerConfig(BaseModel):
    """Settings for the change ledger and bump resolution.

    Attributes:
        ledger_file: Ledger file name relative to the workspace root.
        sync_deps: Cascade bumps from dependencies to their dependents.
        lock_timeout: Seconds to wait for the ledger lock.
        default_branch: Branch used when git cannot report the current one.
        message: Release commit message stored in new ledgers.
        git_user_name: Release commit author name stored in new ledgers.
        git_user_email: Release commit author email stored in new ledgers.
    """

    model_config = ConfigDict(
        alias_generator=lambda name: name.replace("_", "-"),
        populate_by_name=True,
        extra="forbid",
    )

    ledger_file: str = LEDGER_FILE
    sync_deps: bool = True
    lock_timeout: float = Field(default=DEFAULT_LOCK_TIMEOUT, ge=0)
    default_branch: str = "main"
    message: str = DEFAULT_MESSAGE
    git_user_name: str = DEFAULT_GIT_USER_NAME
    git_user_email: str = DEFAULT_GIT_USER_EMAIL


def load_config(root: Path) -> LedgerConfig:
    """Read [tool.monoledger] from root/pyproject.toml.

    Raises:
        WorkspaceError: If the table holds unknown keys or invalid values.
    """
    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return LedgerConfig()

    table = get_tool_table(load_pyproject(pyproject), "monoledger")
    try:
        return LedgerConfig.model_validate(table)
    except ValidationError as exc:
        msg = f"Invalid [tool.monoledger] in {pyproject}: {exc}"
        raise WorkspaceError(msg) from exc


def open_ledger(root: Path, config: LedgerConfig | None = None) -> ChangeLedgerStore:
    """Create the ledger handle for a workspace root."""
    config = config or load_config(root)
    return ChangeLedgerStore(
        root,
        filename=config.ledger_file,
        lock_timeout=config.lock_timeout,
        template=ChangeLedger(
            message=config.message,
            git_user_name=config.git_user_name,
            git_user_email=config.git_user_email,
        ),
    )
