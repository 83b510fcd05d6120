"""Dependency graph construction and depth-first resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .logging import get_logger
from .models import ManifestInfo, ManifestKey

logger = get_logger("graph")

_WHITE, _ACTIVE, _DONE = 0, 1, 2


class DependencyCycleError(ValueError):
    """Raised when manifests depend on each other in a loop."""

    def __init__(self, cycle: List[ManifestKey]) -> None:
        self.cycle = list(cycle)
        super().__init__("Dependency cycle: " + " -> ".join(key.id for key in self.cycle))


@dataclass
class ManifestGraph:
    """Vertices keyed by ManifestKey plus dependency -> dependent edges."""

    vertices: Dict[ManifestKey, ManifestInfo] = field(default_factory=dict)
    edges: Dict[ManifestKey, List[ManifestKey]] = field(default_factory=dict)

    def dependents(self, key: ManifestKey) -> List[ManifestKey]:
        return self.edges.get(key, [])

    def stubs(self) -> List[ManifestInfo]:
        return [info for info in self.vertices.values() if info.is_stub]

    def ordered(self) -> List[ManifestInfo]:
        """Return vertices sorted ascending by weight; unweighted vertices go last."""
        return sorted(
            self.vertices.values(),
            key=lambda info: (info.weight is None, info.weight or 0),
        )


def build_graph(collected: Mapping[ManifestKey, ManifestInfo]) -> ManifestGraph:
    """Turn declared dependencies into edges, adding stubs for undeclared targets."""
    graph = ManifestGraph(vertices=dict(collected))
    stubs: Dict[ManifestKey, ManifestInfo] = {}

    for key, info in collected.items():
        for dependency in info.dependencies:
            if dependency not in collected and dependency not in stubs:
                logger.debug("Manifest %s depends on undeclared %s; adding stub", key, dependency)
                stubs[dependency] = ManifestInfo.stub(dependency)
            dependents = graph.edges.setdefault(dependency, [])
            if key not in dependents:
                dependents.append(key)

    graph.vertices.update(stubs)
    return graph


def resolve(graph: ManifestGraph) -> ManifestGraph:
    """Assign weight, component and descendants to every vertex.

    Weights come from a decreasing counter handed out in depth-first post-order
    along dependency -> dependent edges, so every dependency ends up lighter
    than its dependents. A component is identified by the key of the vertex
    its first traversal started from. Raises DependencyCycleError on a cycle.
    """
    state: Dict[ManifestKey, int] = {key: _WHITE for key in graph.vertices}
    members: Dict[ManifestKey, Set[ManifestKey]] = {}
    counter = len(graph.vertices)

    for root in graph.vertices:
        if state[root] != _WHITE:
            continue
        members[root] = set()
        # Each frame pairs an active vertex with the iterator over its dependents.
        stack: List[Tuple[ManifestKey, Iterator[ManifestKey]]] = []
        path: List[ManifestKey] = []

        def enter(key: ManifestKey) -> None:
            state[key] = _ACTIVE
            graph.vertices[key].component = root
            members[root].add(key)
            path.append(key)
            stack.append((key, iter(graph.dependents(key))))

        enter(root)
        while stack:
            key, dependents = stack[-1]
            dependent = next(dependents, None)
            if dependent is not None:
                if state[dependent] == _ACTIVE:
                    start = path.index(dependent)
                    raise DependencyCycleError(path[start:] + [dependent])
                if state[dependent] == _WHITE:
                    enter(dependent)
                else:
                    _merge(graph, members, graph.vertices[dependent].component, root)
                continue

            info = graph.vertices[key]
            descendants: Set[ManifestKey] = set()
            for child in graph.dependents(key):
                descendants.add(child)
                descendants |= graph.vertices[child].descendants
            info.descendants = descendants
            info.weight = counter
            counter -= 1
            state[key] = _DONE
            stack.pop()
            path.pop()

    return graph


def _merge(
    graph: ManifestGraph,
    members: Dict[ManifestKey, Set[ManifestKey]],
    source: Optional[ManifestKey],
    target: ManifestKey,
) -> None:
    if source is None or source == target:
        return
    moved = members.pop(source)
    for key in moved:
        graph.vertices[key].component = target
    members[target] |= moved


__all__ = ["DependencyCycleError", "ManifestGraph", "build_graph", "resolve"]
