"""Static analysis of the asset dependency graph.

This module works on declared dependencies only; nothing is loaded or
generated. It orders the asset types reachable from a root so that every
type comes after the types it depends on, and rejects graphs containing
cycles before any generation work is done.
"""

from collections import deque, defaultdict
from dataclasses import dataclass
from typing import Hashable, Iterable, Iterator, TYPE_CHECKING

from igniter.asset import Asset
from igniter.errors import CycleDetected

if TYPE_CHECKING:
    from igniter.registry import AssetRegistry

__all__ = ["DependencyGraph", "BuildPlan", "make_build_plan"]


@dataclass(frozen=True)
class BuildPlan:
    """Description of how to build a root asset."""

    root: type[Asset]
    """The asset type being built."""

    build_order: list[type[Asset]]
    """Asset types in the order they will be resolved; the root is last."""


class DependencyGraph:
    """
    Directed graph of declared dependencies between nodes.

    Nodes keep the order in which they were first added, so traversal order
    is deterministic for a given sequence of declarations.
    """

    def __init__(self):
        self._dependencies: dict[Hashable, list[Hashable]] = {}

    def add_dependencies(self, dependee: Hashable, dependencies: Iterable[Hashable]):
        """
        Add one or more dependencies to the graph for a given dependee node.

        Args:
            dependee: The node whose dependencies are being registered.
            dependencies: The nodes this dependee depends on.
        """
        declared = self._dependencies.setdefault(dependee, [])
        declared.extend(d for d in dependencies if d not in declared)

    def traverse(self) -> Iterator[Hashable]:
        """
        Yield every node after all of the nodes it depends on.

        Raises:
            CycleDetected: If some nodes can never be yielded, because they
                lie on a cycle or depend on a node that was never added. The
                message names one blocking chain, such as ``A -> B -> A``.
        """
        unmet = {node: len(dependencies) for node, dependencies in self._dependencies.items()}
        dependents = defaultdict(list)
        for node, dependencies in self._dependencies.items():
            for dependency in dependencies:
                dependents[dependency].append(node)

        ready = deque(node for node, count in unmet.items() if count == 0)
        while ready:
            node = ready.popleft()
            del unmet[node]
            yield node

            for dependent in dependents[node]:
                unmet[dependent] -= 1
                if unmet[dependent] == 0:
                    ready.append(dependent)

        if unmet:
            raise CycleDetected(f"Unresolvable dependencies: {self._blocking_chain(unmet)}")

    def _blocking_chain(self, blocked: dict[Hashable, int]) -> str:
        """Follow unmet dependencies from a blocked node until a cycle or an unknown node."""
        node = next(iter(blocked))
        chain = [node]
        while True:
            node = next(
                d for d in self._dependencies[node] if d in blocked or d not in self._dependencies
            )
            if node not in self._dependencies:
                return " -> ".join(_describe(n) for n in chain) + f" -> {_describe(node)} (undeclared)"
            if node in chain:
                cycle = chain[chain.index(node):] + [node]
                return " -> ".join(_describe(n) for n in cycle)
            chain.append(node)


def make_build_plan(registry: "AssetRegistry", root: type[Asset]) -> BuildPlan:
    """Create a :class:`BuildPlan` for a registered root asset.

    Only the types reachable from the root are included.

    Args:
        registry: The registry holding the root and its transitive dependencies.
        root: The asset type to build.

    Returns:
        The plan listing every reachable type in dependency order.

    Raises:
        DependencyError: If the root or any reachable dependency is not registered.
        CycleDetected: If the reachable dependencies contain a cycle.

    Example:
        >>> plan = make_build_plan(default_registry(), Bootstrap)
        >>> plan.build_order[-1] is Bootstrap
        True
    """
    graph = DependencyGraph()
    seen: set[type[Asset]] = set()
    pending = deque([root])
    while pending:
        asset_type = pending.popleft()
        if asset_type in seen:
            continue
        seen.add(asset_type)
        provider = registry.provider_for(asset_type)
        graph.add_dependencies(asset_type, provider.dependencies)
        pending.extend(provider.dependencies)

    return BuildPlan(root, list(graph.traverse()))


def _describe(node: Hashable) -> str:
    return getattr(node, "__name__", str(node))
