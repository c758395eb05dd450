"""Version parsing and bumping utilities.

Turns a resolved plan entry into the next version string for a package.
Current versions are read as PEP 440 (what pyproject.toml allows), and the
result is always a PEP 440 version as well:

- severity bumps work on the ``major.minor.micro`` release segment, padding
  incomplete versions ("1.0" → "1.0.0")
- alpha, beta and rc become ``a``/``b``/``rc`` pre-releases numbered by the
  build identity
- snapshot becomes a ``.dev`` release numbered by the build identity
"""

from __future__ import annotations

import semver
from packaging.version import InvalidVersion, Version

from .bumps import BumpKind, Channel, Severity
from .errors import WorkspaceError

_CHANNEL_SEGMENTS = {
    Channel.ALPHA: "a",
    Channel.BETA: "b",
    Channel.RC: "rc",
    Channel.SNAPSHOT: ".dev",
}


def parse_version(version_str: str) -> Version:
    """Parse a PEP 440 version string.

    Raises:
        WorkspaceError: If the string is not a valid version.
    """
    try:
        return Version(version_str.strip())
    except InvalidVersion as exc:
        raise WorkspaceError(f"Invalid version {version_str!r}") from exc


def release_triple(version: Version) -> semver.Version:
    """Return the release segment as major.minor.patch.

    Missing components are zero; epoch, pre, post, dev and local parts and
    any fourth release component are dropped.
    """
    major, minor, patch = (*version.release, 0, 0)[:3]
    return semver.Version(major, minor, patch)


def bump_version(version_str: str, kind: BumpKind, identity: str | None = None) -> str:
    """Compute the next version for a bump kind.

    Examples:
        bump_version("1.2.3", Severity.MINOR) → "1.3.0"
        bump_version("1.2.3rc1", Severity.PATCH) → "1.2.4"
        bump_version("1.2.3", Channel.BETA, "202601011200000123456789")
            → "1.2.3b202601011200000123456789"
        bump_version("1.2", Channel.SNAPSHOT, "202601011200000123456789")
            → "1.2.0.dev202601011200000123456789"

    Raises:
        WorkspaceError: If version_str is not a valid version.
        ValueError: If a channel bump has no numeric identity.
    """
    base = release_triple(parse_version(version_str))
    if isinstance(kind, Channel):
        if not identity or not identity.isdigit():
            raise ValueError(f"{kind.value} bump requires a numeric build identity")
        return f"{base}{_CHANNEL_SEGMENTS[kind]}{identity}"
    if kind is Severity.MAJOR:
        return str(base.bump_major())
    if kind is Severity.MINOR:
        return str(base.bump_minor())
    return str(base.bump_patch())
