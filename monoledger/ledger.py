"""Persisted change ledger.

The ledger lives in a JSON file at the workspace root (``.changes.json`` by
default) and maps branch names to the changes recorded on them:

    {
      "message": "chore(release): |---| release new version",
      "git_user_name": "...",
      "git_user_email": "...",
      "changes": {
        "feature/x": {
          "deploy": ["int"],
          "pkgs": [{"package": "@scope/foo", "releaseAs": "patch"}]
        }
      }
    }

Every mutation re-reads the file, applies the change and writes it back
while holding an advisory lock on ``<ledger>.lock``, so concurrent CI jobs
cannot drop each other's entries. Writes go through a temp file and an
atomic replace; a failed write leaves the previous ledger in place.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout
from pydantic import ValidationError

from .errors import StorageError
from .files import atomic_write_text
from .models import BranchChangeSet, Change, ChangeLedger

LEDGER_FILE = ".changes.json"
DEFAULT_LOCK_TIMEOUT = 10.0


class ChangeLedgerStore:
    """Handle to the change ledger of one workspace root.

    Args:
        root: Workspace root directory.
        filename: Ledger file name, relative to root.
        lock_timeout: Seconds to wait for the ledger lock before giving up.
        template: Ledger used as the initial content when the file does not
                  exist yet. Only its metadata fields are used.
    """

    def __init__(
        self,
        root: Path,
        *,
        filename: str = LEDGER_FILE,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
        template: ChangeLedger | None = None,
    ) -> None:
        self.root = Path(root)
        self.path = self.root / filename
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.lock_timeout = lock_timeout
        self._template = template or ChangeLedger()

    def exists(self) -> bool:
        """Whether the ledger file has been created."""
        return self.path.is_file()

    def initialize(self) -> ChangeLedger:
        """Load the ledger, creating and persisting an empty one if missing."""
        with self._locked():
            ledger = self._read()
            if ledger is None:
                ledger = self._empty()
                self._write(ledger)
            return ledger

    def add_change(
        self, change: Change, deploy_targets: Iterable[str], branch: str
    ) -> bool:
        """Record change on branch.

        Returns:
            False if the same (package, release_as) is already recorded on the
            branch (nothing is written), True once the change is persisted.
        """
        with self._locked():
            ledger = self._read() or self._empty()
            entry = ledger.changes.get(branch)
            if entry is None:
                entry = ledger.changes[branch] = BranchChangeSet()
            elif change in entry.changes:
                return False

            entry.changes.append(change)
            for target in deploy_targets:
                if target not in entry.deploy_targets:
                    entry.deploy_targets.append(target)
            self._write(ledger)
            return True

    def remove_change(self, branch: str) -> bool:
        """Delete every change recorded on branch.

        Returns:
            True if the branch was present and has been removed.
        """
        with self._locked():
            ledger = self._read()
            if ledger is None or branch not in ledger.changes:
                return False
            del ledger.changes[branch]
            self._write(ledger)
            return True

    def change_exists(self, branch: str, package: str) -> bool:
        """Whether package has a change recorded on branch."""
        return self.get_changes_by_package(package, branch) is not None

    def get_changes(self) -> ChangeLedger:
        """Return a snapshot of the whole ledger."""
        return self._read() or self._empty()

    def get_changes_by_branch(self, branch: str) -> BranchChangeSet | None:
        return self.get_changes().changes.get(branch)

    def get_changes_by_package(self, package: str, branch: str) -> Change | None:
        """Return the first change for package on branch, if any."""
        entry = self.get_changes_by_branch(branch)
        return entry.find(package) if entry else None

    def _empty(self) -> ChangeLedger:
        return self._template.model_copy(update={"changes": {}}, deep=True)

    @contextmanager
    def _locked(self) -> Iterator[None]:
        lock = FileLock(str(self.lock_path), timeout=self.lock_timeout)
        try:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock.acquire()
        except Timeout as exc:
            raise StorageError(
                f"Timed out after {self.lock_timeout}s waiting for ledger lock",
                self.lock_path,
            ) from exc
        except OSError as exc:
            raise StorageError(f"Failed to lock ledger: {exc}", self.lock_path) from exc
        try:
            yield
        finally:
            lock.release()

    def _read(self) -> ChangeLedger | None:
        if not self.path.exists():
            return None
        try:
            return ChangeLedger.model_validate_json(self.path.read_text("utf-8"))
        except OSError as exc:
            raise StorageError(f"Failed to read ledger: {exc}", self.path) from exc
        except ValidationError as exc:
            raise StorageError(f"Invalid ledger content: {exc}", self.path) from exc

    def _write(self, ledger: ChangeLedger) -> None:
        content = ledger.model_dump_json(by_alias=True, indent=2) + "\n"
        try:
            atomic_write_text(self.path, content)
        except OSError as exc:
            raise StorageError(f"Failed to write ledger: {exc}", self.path) from exc
