"""Bump propagation: direct changes → full bump plan.

Resolution steps:
1. Reject changes for packages that are not in the workspace graph
2. Seed the plan from the direct changes, merging repeats per package
3. Walk the graph dependencies-first and cascade bumps to dependents
4. Assign one build identity per prerelease channel in the plan

A dependency on a severity bump cascades as a patch, whatever the severity.
A dependency on a channel bump cascades as the same channel, so the whole
prerelease chain is published together.
"""

from __future__ import annotations

from collections.abc import Iterable

from .bumps import BumpKind, Channel, Severity, is_channel, merge
from .errors import UnknownPackageError
from .graph import DependencyGraph
from .identity import IdentityGenerator
from .models import BumpPlan, Change, Origin, PlanEntry


def cascade_candidate(dependency_kind: BumpKind) -> BumpKind:
    """The bump a dependent receives when one of its dependencies bumps."""
    if isinstance(dependency_kind, Channel):
        return dependency_kind
    return Severity.PATCH


def resolve(
    graph: DependencyGraph,
    direct_changes: Iterable[Change],
    *,
    sync: bool = True,
    identities: IdentityGenerator | None = None,
) -> BumpPlan:
    """Resolve direct changes into a bump plan for every affected package.

    Args:
        graph: Validated workspace dependency graph.
        direct_changes: Changes recorded for one branch, in ledger order.
        sync: When False, dependents are not cascaded and only the direct
              changes appear in the plan.
        identities: Identity source for this run. A new generator is used
                    when omitted.

    Returns:
        The resolved BumpPlan.

    Raises:
        UnknownPackageError: If a change targets a package missing from graph.
        CycleError: If the graph turns out to be cyclic.
    """
    direct_changes = list(direct_changes)

    unknown = list(
        dict.fromkeys(c.package for c in direct_changes if c.package not in graph)
    )
    if unknown:
        raise UnknownPackageError(unknown)

    kinds: dict[str, BumpKind] = {}
    origins: dict[str, Origin] = {}
    for change in direct_changes:
        kinds[change.package] = merge(kinds.get(change.package), change.release_as)
        origins[change.package] = Origin.DIRECT

    if sync:
        for name in graph.topo_order():
            for dep in graph.dependencies(name):
                if dep not in kinds:
                    continue
                candidate = cascade_candidate(kinds[dep])
                kinds[name] = merge(kinds.get(name), candidate)
                origins.setdefault(name, Origin.INHERITED)

    identities = identities or IdentityGenerator()
    plan: dict[str, PlanEntry] = {}
    # Emit in workspace listing order
    for name in graph.names:
        if name not in kinds:
            continue
        kind = kinds[name]
        identity = identities.next(kind) if is_channel(kind) else None
        plan[name] = PlanEntry(kind=kind, origin=origins[name], identity=identity)

    return BumpPlan(plan)
