"""Tests for monoledger.identity."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from monoledger.bumps import Channel
from monoledger.identity import IDENTITY_LENGTH, IdentityGenerator

IDENTITY_RE = re.compile(r"^\d{24}$")


def _fixed_clock() -> datetime:
    return datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestIdentityGenerator:
    def test_shape(self) -> None:
        identity = IdentityGenerator().next(Channel.SNAPSHOT)
        assert IDENTITY_RE.match(identity)
        assert len(identity) == IDENTITY_LENGTH

    def test_uses_utc_timestamp(self) -> None:
        gen = IdentityGenerator(clock=_fixed_clock, token=lambda: "0123456789")
        assert gen.next(Channel.ALPHA) == "202601020304050123456789"

    def test_converts_local_time_to_utc(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        gen = IdentityGenerator(
            clock=lambda: datetime(2026, 1, 2, 5, 4, 5, tzinfo=plus_two),
            token=lambda: "4242424242",
        )
        assert gen.next(Channel.RC) == "202601020304054242424242"

    def test_cached_per_channel(self) -> None:
        gen = IdentityGenerator()
        first = gen.next(Channel.SNAPSHOT)
        assert gen.next(Channel.SNAPSHOT) == first
        assert gen.issued == {Channel.SNAPSHOT: first}

    def test_distinct_channels_get_distinct_identities(self) -> None:
        tokens = iter(["0000000001", "0000000002"])
        gen = IdentityGenerator(clock=_fixed_clock, token=lambda: next(tokens))
        assert gen.next(Channel.ALPHA) != gen.next(Channel.BETA)

    def test_separate_generators_do_not_collide(self) -> None:
        identities = {IdentityGenerator().next(Channel.SNAPSHOT) for _ in range(50)}
        assert len(identities) == 50
