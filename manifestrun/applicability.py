"""Flag resolved manifests as runnable or blocked by missing dependencies."""

from __future__ import annotations

from .graph import ManifestGraph


def mark(graph: ManifestGraph) -> ManifestGraph:
    """Populate ``applicable`` and ``blocked_by`` on every vertex.

    Stubs are never applicable, and neither is anything reachable from one;
    each blocked vertex lists the stubs responsible. Requires ``resolve``.
    """
    for info in graph.vertices.values():
        info.applicable = None
        info.blocked_by = []

    for stub in graph.stubs():
        stub.applicable = False
        for key in stub.descendants:
            blocked = graph.vertices[key]
            blocked.applicable = False
            if stub.key not in blocked.blocked_by:
                blocked.blocked_by.append(stub.key)

    for info in graph.vertices.values():
        if info.applicable is None:
            info.applicable = True

    return graph


__all__ = ["mark"]
