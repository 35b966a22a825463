"""
Dependency and conflict resolution

There is one version per package in the index, so resolution is a plain
depth-first walk: no SAT solving, no version choice beyond "=" pins.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from .dependents import DependentsGraph
from .errors import MalformedSpecError
from .index import NameResolver, PackageIndex
from .names import parse_constraint

logger = logging.getLogger(__name__)


@dataclass
class Closure:
    """Result of collecting a package's dependencies.

    ordered lists dependencies before the packages that need them, the
    root package last.
    """
    root: str
    ordered: List[str] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)
    # (dependee, dependent) pairs discovered during the walk
    edges: List[Tuple[str, str]] = field(default_factory=list)
    host_dependencies: List[str] = field(default_factory=list)

    def __contains__(self, full_name: str) -> bool:
        return full_name in self.ordered


class DependencyResolver:
    """Computes install closures from the index."""

    def __init__(self, index: PackageIndex, names: NameResolver):
        self.index = index
        self.names = names

    def collect(self, full_name: str) -> Closure:
        """Collect the closure of full_name.

        Does not touch the dependents graph; pass the result to commit()
        once the installation is confirmed.

        Raises:
            PackageNotFound: If a dependency does not resolve
            MalformedSpecError: If a dependency spec is malformed
        """
        closure = Closure(root=full_name)
        visited: Set[str] = set()
        edges: Set[Tuple[str, str]] = set()
        conflicts: Set[str] = set()

        # Iterative post-order walk; each frame is (package, pending deps)
        visited.add(full_name)
        stack = [(full_name, self._dependencies(full_name, closure, conflicts))]

        while stack:
            current, pending = stack[-1]
            if not pending:
                stack.pop()
                closure.ordered.append(current)
                continue

            dep_name = pending.pop(0)
            edge = (dep_name, current)
            if dep_name != current and edge not in edges:
                edges.add(edge)
                closure.edges.append(edge)

            if dep_name in visited:
                continue
            visited.add(dep_name)
            stack.append((dep_name, self._dependencies(dep_name, closure, conflicts)))

        logger.debug(f"Closure of {full_name}: {closure.ordered}")
        return closure

    def _dependencies(self, full_name: str, closure: Closure, conflicts: Set[str]) -> List[str]:
        """Resolved dependencies of one package; collects its conflicts."""
        record = self.index.lookup(full_name)

        for spec in record.conflicts:
            try:
                conflict = parse_constraint(spec)
            except MalformedSpecError:
                logger.warning(f"{full_name}: ignoring malformed conflict {spec!r}")
                continue
            if conflict.name not in conflicts:
                conflicts.add(conflict.name)
                closure.conflicts.append(conflict.name)

        resolved = []
        for dep in record.dependencies:
            if dep.is_host:
                logger.warning(
                    f"{full_name} requires {dep.name}, which must be installed "
                    f"with the host package manager"
                )
                if dep.name not in closure.host_dependencies:
                    closure.host_dependencies.append(dep.name)
                continue

            target = self.names.resolve(dep.name, version=dep.version if dep.is_exact else None)
            if target not in resolved:
                resolved.append(target)
        return resolved

    def commit(self, closure: Closure, graph: DependentsGraph) -> int:
        """Record the closure's edges in the dependents graph.

        Returns:
            Number of new edges
        """
        added = 0
        for dependee, dependent in closure.edges:
            if graph.add(dependee, dependent):
                added += 1
        return added
