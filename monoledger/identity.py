"""Build identities for prerelease channel bumps.

Every package released on the same channel in one resolution shares a single
identity, so interdependent prerelease builds can pin each other exactly.
Identities are built from the current UTC time plus random digits, so
separate runs never collide.

Shape: ``YYYYMMDDHHMMSS`` followed by 10 random digits (24 digits). Being
all digits, it can number a PEP 440 pre-release or dev release.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from .bumps import Channel

IDENTITY_LENGTH = 24
_TOKEN_DIGITS = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _random_digits() -> str:
    return f"{uuid.uuid4().int % 10**_TOKEN_DIGITS:0{_TOKEN_DIGITS}d}"


class IdentityGenerator:
    """Mints one identity per channel and remembers it.

    Use a fresh instance for every resolution run.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        token: Callable[[], str] = _random_digits,
    ) -> None:
        self._clock = clock
        self._token = token
        self._issued: dict[Channel, str] = {}

    def next(self, channel: Channel) -> str:
        """Return the identity for channel, minting it on first use."""
        if channel not in self._issued:
            stamp = self._clock().astimezone(timezone.utc).strftime("%Y%m%d%H%M%S")
            self._issued[channel] = f"{stamp}{self._token()}"
        return self._issued[channel]

    @property
    def issued(self) -> dict[Channel, str]:
        return dict(self._issued)
