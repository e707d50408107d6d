"""Queries over the page dependency graph.

Graphs are plain ``dict[str, list[str]]`` mappings from page id to the ids it
depends on. Edges to unknown ids are ignored here; reporting them is the
linter's job.
"""

from __future__ import annotations

import heapq


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Return each dependency cycle once, as a closed path.

    Every cycle is rotated so its smallest id comes first, e.g.
    ``["a", "c", "b", "a"]``. Self-loops are skipped.
    """
    visited: set[str] = set()
    seen: set[tuple[str, ...]] = set()
    cycles: list[list[str]] = []

    for start in sorted(graph):
        if start in visited:
            continue
        path = [start]
        on_path = {start}
        pending = [iter(_edges(graph, start))]
        while pending:
            dependency = next(pending[-1], None)
            if dependency is None:
                pending.pop()
                finished = path.pop()
                on_path.discard(finished)
                visited.add(finished)
                continue
            if dependency in visited:
                continue
            if dependency in on_path:
                loop = path[path.index(dependency) :]
                first = loop.index(min(loop))
                rotated = tuple(loop[first:] + loop[:first])
                if rotated not in seen:
                    seen.add(rotated)
                    cycles.append([*rotated, rotated[0]])
                continue
            path.append(dependency)
            on_path.add(dependency)
            pending.append(iter(_edges(graph, dependency)))
    return cycles


def _edges(graph: dict[str, list[str]], node: str) -> list[str]:
    return [dep for dep in graph.get(node, []) if dep != node and dep in graph]


def topological_order(graph: dict[str, list[str]]) -> list[str]:
    """Order ids so dependencies come first, breaking ties by id."""
    remaining = {node: {dep for dep in deps if dep in graph and dep != node} for node, deps in graph.items()}
    dependents: dict[str, list[str]] = {node: [] for node in graph}
    for node, deps in remaining.items():
        for dep in deps:
            dependents[dep].append(node)

    ready = [node for node, deps in remaining.items() if not deps]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            remaining[dependent].discard(node)
            if not remaining[dependent]:
                heapq.heappush(ready, dependent)

    if len(order) != len(graph):
        cycles = find_cycles(graph)
        detail = " -> ".join(cycles[0]) if cycles else "unresolved dependencies"
        raise ValueError(f"Circular page dependency detected: {detail}")
    return order


def transitive_dependencies(graph: dict[str, list[str]], node: str) -> list[str]:
    """Return every id reachable from ``node`` along dependency edges."""
    return _reachable(graph, node)


def dependents(graph: dict[str, list[str]], node: str) -> list[str]:
    """Return every id that depends on ``node`` directly or indirectly."""
    reverse: dict[str, list[str]] = {key: [] for key in graph}
    for source, deps in graph.items():
        for dep in deps:
            if dep in reverse:
                reverse[dep].append(source)
    return _reachable(reverse, node)


def _reachable(graph: dict[str, list[str]], node: str) -> list[str]:
    found: set[str] = set()
    stack = list(graph.get(node, []))
    while stack:
        current = stack.pop()
        if current in found or current not in graph:
            continue
        found.add(current)
        stack.extend(graph[current])
    found.discard(node)
    return sorted(found)
