"""Tests for monoledger.models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from monoledger.bumps import Channel, Severity
from monoledger.models import (
    DEFAULT_MESSAGE,
    BranchChangeSet,
    BumpPlan,
    Change,
    ChangeLedger,
    Origin,
    PlanEntry,
    VersionBump,
    WorkspacePackage,
)


class TestWorkspacePackage:
    def test_create_with_required_fields(self) -> None:
        pkg = WorkspacePackage(name="foo")
        assert pkg.internal_dependencies == []
        assert pkg.path == "."
        assert pkg.version == "0.0.0"

    def test_create_with_deps(self) -> None:
        pkg = WorkspacePackage(name="bar", internal_dependencies=["foo", "baz"])
        assert pkg.internal_dependencies == ["foo", "baz"]


class TestChange:
    def test_parses_kind_from_string(self) -> None:
        change = Change(package="a", release_as="minor")
        assert change.release_as is Severity.MINOR

    def test_parses_channel_from_string(self) -> None:
        change = Change(package="a", release_as="snapshot")
        assert change.release_as is Channel.SNAPSHOT

    def test_accepts_alias(self) -> None:
        change = Change.model_validate({"package": "a", "releaseAs": "patch"})
        assert change.release_as is Severity.PATCH

    def test_serializes_with_alias(self) -> None:
        change = Change(package="a", release_as=Severity.MAJOR)
        assert change.model_dump(mode="json", by_alias=True) == {
            "package": "a",
            "releaseAs": "major",
        }

    def test_equality_on_package_and_kind(self) -> None:
        assert Change(package="a", release_as="patch") == Change(
            package="a", release_as=Severity.PATCH
        )
        assert Change(package="a", release_as="patch") != Change(
            package="a", release_as="minor"
        )

    def test_is_immutable(self) -> None:
        change = Change(package="a", release_as="patch")
        with pytest.raises(ValidationError):
            change.package = "b"

    def test_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValidationError):
            Change(package="a", release_as="huge")


class TestBranchChangeSet:
    def test_find_returns_first_match(self) -> None:
        entry = BranchChangeSet(
            changes=[
                Change(package="a", release_as="patch"),
                Change(package="b", release_as="minor"),
                Change(package="a", release_as="major"),
            ]
        )
        assert entry.find("a") == Change(package="a", release_as="patch")
        assert entry.find("z") is None

    def test_serialized_keys(self) -> None:
        entry = BranchChangeSet(
            deploy_targets=["int"], changes=[Change(package="a", release_as="rc")]
        )
        data = entry.model_dump(mode="json", by_alias=True)
        assert data == {
            "deploy": ["int"],
            "pkgs": [{"package": "a", "releaseAs": "rc"}],
        }


class TestChangeLedger:
    def test_defaults(self) -> None:
        ledger = ChangeLedger()
        assert ledger.message == DEFAULT_MESSAGE
        assert ledger.changes == {}

    def test_json_round_trip_is_stable(self) -> None:
        ledger = ChangeLedger(
            changes={
                "feature/x": BranchChangeSet(
                    deploy_targets=["int", "prod"],
                    changes=[Change(package="@scope/foo", release_as="patch")],
                )
            }
        )
        dumped = ledger.model_dump_json(by_alias=True)
        reloaded = ChangeLedger.model_validate_json(dumped)
        assert reloaded == ledger
        assert json.loads(reloaded.model_dump_json(by_alias=True)) == json.loads(dumped)


class TestBumpPlan:
    def test_mapping_behaviour(self) -> None:
        plan = BumpPlan(
            {
                "a": PlanEntry(kind=Severity.MINOR, origin=Origin.DIRECT),
                "b": PlanEntry(kind=Severity.PATCH, origin=Origin.INHERITED),
            }
        )
        assert len(plan) == 2
        assert "a" in plan
        assert "z" not in plan
        assert list(plan) == ["a", "b"]
        assert plan["b"].origin is Origin.INHERITED
        assert plan.get("z") is None

    def test_empty_plan_is_falsy(self) -> None:
        assert not BumpPlan()

    def test_serializes_as_mapping(self) -> None:
        plan = BumpPlan(
            {"a": PlanEntry(kind=Channel.BETA, origin=Origin.DIRECT, identity="x")}
        )
        assert json.loads(plan.model_dump_json()) == {
            "a": {"kind": "beta", "origin": "direct", "identity": "x"}
        }


class TestVersionBump:
    def test_create(self) -> None:
        bump = VersionBump(old="1.0.0", new="1.0.1")
        assert bump.old == "1.0.0"
        assert bump.new == "1.0.1"
