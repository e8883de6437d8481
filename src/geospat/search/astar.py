# search/astar.py
from __future__ import annotations

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from geospat.domain.entities.geography import NodeId, PathResult
from geospat.domain.errors import Cancelled, InvalidGraph, NoPathFound
from geospat.domain.graph import Graph
from geospat.search.pqueue import PriorityQueue
from geospat.sim.deadline import CancelSignal
from geospat.sim.hooks import EngineHooks, NoopHooks

Heuristic = Callable[[Graph, NodeId, NodeId], float]

# relative slack below which a cheaper g is float noise, not a better route
_RTOL = 1e-12

_NO_PARENT = object()


def straight_line(graph: Graph, u: NodeId, goal: NodeId) -> float:
    return graph.distance(u, goal)


def zero(graph: Graph, u: NodeId, goal: NodeId) -> float:
    return 0.0


def _improves(new: float, old: float) -> bool:
    if math.isinf(old):
        return new < old
    return old - new > _RTOL * abs(old)


@dataclass
class NodeState:
    g: float = math.inf
    f: float = math.inf
    parent: object = _NO_PARENT  # node ids may be None
    visited: bool = False


@dataclass
class SearchState:
    """Per-call scratch, keyed by node id. Never stored on the graph."""

    nodes: dict[NodeId, NodeState] = field(default_factory=dict)
    expanded: int = 0

    def __getitem__(self, node_id: NodeId) -> NodeState:
        st = self.nodes.get(node_id)
        if st is None:
            st = self.nodes[node_id] = NodeState()
        return st

    def reconstruct(self, goal: NodeId) -> tuple[NodeId, ...]:
        path = [goal]
        cur = self.nodes[goal].parent
        while cur is not _NO_PARENT:
            path.append(cur)
            cur = self.nodes[cur].parent
        path.reverse()
        return tuple(path)


def find_path(
    graph: Graph,
    start: NodeId,
    goal: NodeId,
    *,
    heuristic: Heuristic | None = None,
    hooks: EngineHooks | None = None,
    deadline: CancelSignal | None = None,
) -> PathResult:
    """
    Minimum-cost path from ``start`` to ``goal`` (both inclusive).

    ``heuristic(graph, node, goal)`` must be admissible and consistent; the
    default is straight-line distance under the graph metric, which holds
    whenever edge weights are at least the metric distance between their
    endpoints. Raises NoPathFound when the goal is unreachable and Cancelled
    when ``deadline`` fires between two queue extractions.
    """
    for nid in (start, goal):
        if nid not in graph:
            raise InvalidGraph(f"unknown node id {nid!r}")
    h = heuristic or straight_line
    hooks = hooks or NoopHooks()
    t0 = time.perf_counter()

    if start == goal:
        hooks.search_end(
            start=start, goal=goal, found=True, cost=0.0, expanded=0, length=1, wall_ms=0.0
        )
        return PathResult((start,), 0.0, 0)

    hooks.search_start(start=start, goal=goal, nodes=len(graph), edges=graph.edge_count)
    state = SearchState()
    s0 = state[start]
    s0.g = 0.0
    s0.f = h(graph, start, goal)
    open_set: PriorityQueue = PriorityQueue()
    open_set.insert(s0.f, start)

    while not open_set.is_empty():
        if deadline is not None:
            try:
                deadline.check("find_path")
            except Cancelled as exc:
                hooks.error("find_path", reason=exc.reason, expanded=state.expanded)
                raise

        current = open_set.extract_min()
        cur = state[current]
        if current == goal:
            path = state.reconstruct(goal)
            hooks.search_end(
                start=start,
                goal=goal,
                found=True,
                cost=cur.g,
                expanded=state.expanded,
                length=len(path),
                wall_ms=(time.perf_counter() - t0) * 1000,
            )
            return PathResult(path, cur.g, state.expanded)
        if cur.visited:
            continue
        cur.visited = True
        state.expanded += 1
        hooks.expand(current, g=cur.g, f=cur.f, qsize=len(open_set), expanded=state.expanded)

        for edge in graph.neighbors(current):
            nb = state[edge.target]
            if nb.visited:
                continue
            tentative = cur.g + edge.weight
            if _improves(tentative, nb.g):
                nb.parent = current
                nb.g = tentative
                nb.f = tentative + h(graph, edge.target, goal)
                open_set.insert(nb.f, edge.target)

    hooks.search_end(
        start=start,
        goal=goal,
        found=False,
        cost=math.inf,
        expanded=state.expanded,
        length=0,
        wall_ms=(time.perf_counter() - t0) * 1000,
    )
    hooks.error("find_path", reason="no_path", start=start, goal=goal)
    raise NoPathFound(start, goal)
