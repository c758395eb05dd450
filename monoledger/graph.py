"""Workspace dependency graph.

Builds a directed graph from the workspace package listing and provides the
traversal order used by the resolver. An edge A → B means "A depends on B",
so B has to be settled before A.

Nodes are interned to integer handles; edges are adjacency lists of handles.
"""

from __future__ import annotations

from collections.abc import Iterable

from .errors import CycleError, WorkspaceError
from .models import WorkspacePackage


class DependencyGraph:
    """Directed dependency graph over package names."""

    def __init__(self) -> None:
        self._index: dict[str, int] = {}
        self._names: list[str] = []
        self._deps: list[list[int]] = []
        self._rdeps: list[list[int]] = []
        # package → dependency names that are not workspace packages
        self.external: dict[str, list[str]] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._names)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def add_node(self, name: str) -> int:
        """Add a package node and return its handle.

        Raises:
            WorkspaceError: If the name is already a node.
        """
        if name in self._index:
            raise WorkspaceError(f"Duplicate package name in workspace: {name}")
        handle = len(self._names)
        self._index[name] = handle
        self._names.append(name)
        self._deps.append([])
        self._rdeps.append([])
        return handle

    def add_edge(self, dependent: str, dependency: str) -> None:
        """Record that dependent depends on dependency. Repeated edges are ignored."""
        src, dst = self._index[dependent], self._index[dependency]
        if dst not in self._deps[src]:
            self._deps[src].append(dst)
            self._rdeps[dst].append(src)

    def dependencies(self, name: str) -> list[str]:
        """Packages that name depends on, in declaration order."""
        return [self._names[h] for h in self._deps[self._index[name]]]

    def dependents(self, name: str) -> list[str]:
        """Packages that depend on name."""
        return [self._names[h] for h in self._rdeps[self._index[name]]]

    def topo_order(self) -> list[str]:
        """Sort packages so that dependencies come before their dependents.

        Uses Kahn's algorithm. Packages that become ready at the same time
        are taken alphabetically for deterministic output.

        Raises:
            CycleError: If a dependency cycle is detected.

        Example:
            If A depends on B, and B depends on C:
            topo_order() → [C, B, A]
        """
        # Count unsettled dependencies for each package
        in_degree = [len(deps) for deps in self._deps]
        queue = sorted(
            (h for h, d in enumerate(in_degree) if d == 0), key=self._names.__getitem__
        )
        order: list[int] = []

        while queue:
            node = queue.pop(0)
            order.append(node)
            ready: list[int] = []
            for dependent in self._rdeps[node]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready.append(dependent)
            queue.extend(sorted(ready, key=self._names.__getitem__))

        # Anything left over sits on or behind a cycle
        if len(order) != len(self._names):
            remaining = set(range(len(self._names))) - set(order)
            raise CycleError(self._cycle_within(remaining))

        return [self._names[h] for h in order]

    def find_cycle(self) -> list[str] | None:
        """Return one dependency cycle as a list of names, or None if acyclic."""
        cycle = self._cycle_within(set(range(len(self._names))))
        return cycle or None

    def _cycle_within(self, nodes: set[int]) -> list[str]:
        """Depth-first search for a back edge among nodes.

        The returned path starts and ends with the same package name.
        """
        # 1 = on the current path, 2 = fully explored
        state: dict[int, int] = {}
        for start in sorted(nodes, key=self._names.__getitem__):
            if start in state:
                continue
            state[start] = 1
            path = [start]
            stack = [iter(self._deps[start])]
            while stack:
                for nxt in stack[-1]:
                    if nxt not in nodes:
                        continue
                    if state.get(nxt) == 1:
                        loop = path[path.index(nxt) :] + [nxt]
                        return [self._names[h] for h in loop]
                    if nxt not in state:
                        state[nxt] = 1
                        path.append(nxt)
                        stack.append(iter(self._deps[nxt]))
                        break
                else:
                    state[path.pop()] = 2
                    stack.pop()
        return []


def build_graph(packages: Iterable[WorkspacePackage]) -> DependencyGraph:
    """Build and validate the dependency graph for a workspace snapshot.

    Dependencies that are not workspace packages are left out of the graph
    and recorded on ``graph.external``.

    Raises:
        WorkspaceError: If two packages share a name.
        CycleError: If the dependencies form a cycle.
    """
    packages = list(packages)
    graph = DependencyGraph()
    for pkg in packages:
        graph.add_node(pkg.name)

    for pkg in packages:
        for dep in pkg.internal_dependencies:
            if dep in graph:
                graph.add_edge(pkg.name, dep)
            else:
                graph.external.setdefault(pkg.name, []).append(dep)

    cycle = graph.find_cycle()
    if cycle:
        raise CycleError(cycle)
    return graph
