"""Bump kinds and the rules for merging them.

A bump is either a standard severity step (major/minor/patch, ordered) or a
prerelease channel (snapshot/alpha/beta/rc, unordered). The two families are
separate enums so every merge decision has to say which family it is in.
"""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Ordered semantic-versioning bump."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


class Channel(str, Enum):
    """Prerelease channel bump. Channels have no ordering among themselves."""

    SNAPSHOT = "snapshot"
    ALPHA = "alpha"
    BETA = "beta"
    RC = "rc"


_SEVERITY_RANK = {Severity.PATCH: 1, Severity.MINOR: 2, Severity.MAJOR: 3}

BumpKind = Severity | Channel

BUMP_KINDS: tuple[str, ...] = tuple(s.value for s in Severity) + tuple(
    c.value for c in Channel
)


def parse_bump_kind(value: str) -> BumpKind:
    """Parse a bump kind name such as ``"minor"`` or ``"snapshot"``.

    Raises:
        ValueError: If the name is not a known kind.
    """
    name = value.strip().lower()
    for family in (Severity, Channel):
        try:
            return family(name)
        except ValueError:
            continue
    raise ValueError(
        f"Unknown bump kind {value!r} (expected one of: {', '.join(BUMP_KINDS)})"
    )


def is_channel(kind: BumpKind) -> bool:
    return isinstance(kind, Channel)


def merge(existing: BumpKind | None, incoming: BumpKind) -> BumpKind:
    """Merge an incoming bump into the one already chosen for a package.

    Rules:
    - nothing chosen yet: take the incoming kind
    - two severities: the higher one wins, ties keep the existing kind
    - a channel beats a severity, whichever side it is on
    - two different channels: the existing (first declared) one is kept

    Examples:
        merge(None, Severity.PATCH) → patch
        merge(Severity.PATCH, Severity.MAJOR) → major
        merge(Severity.MAJOR, Channel.SNAPSHOT) → snapshot
        merge(Channel.BETA, Channel.ALPHA) → beta
    """
    if existing is None:
        return incoming
    if isinstance(existing, Channel):
        return existing
    if isinstance(incoming, Channel):
        return incoming
    return incoming if incoming.rank > existing.rank else existing
