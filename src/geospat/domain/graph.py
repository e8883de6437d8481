# domain/graph.py
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType

from geospat.domain.distance import metric_fn
from geospat.domain.entities.geography import Edge, Node, NodeId, Point, as_point
from geospat.domain.errors import EmptyInput, InvalidGraph


class Graph:
    """
    Immutable topology: nodes keyed by id plus an outgoing adjacency index.
    Holds no search state, so one instance can serve any number of
    concurrent searches.
    """

    __slots__ = ("_nodes", "_adj", "_metric", "_dist", "_n_edges")

    def __init__(
        self,
        nodes: Mapping[NodeId, Node],
        adj: Mapping[NodeId, tuple[Edge, ...]],
        metric: str,
    ):
        self._nodes = MappingProxyType(dict(nodes))
        self._adj = MappingProxyType({u: tuple(adj.get(u, ())) for u in self._nodes})
        self._metric = metric
        self._dist = metric_fn(metric)
        self._n_edges = sum(len(es) for es in self._adj.values())

    @property
    def nodes(self) -> Mapping[NodeId, Node]:
        return self._nodes

    @property
    def metric(self) -> str:
        return self._metric

    @property
    def edge_count(self) -> int:
        return self._n_edges

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def neighbors(self, node_id: NodeId) -> tuple[Edge, ...]:
        return self._adj[node_id]

    def node_point(self, node_id: NodeId) -> Point:
        return self._nodes[node_id].point

    def distance(self, u: NodeId, v: NodeId) -> float:
        """Straight-line distance between two nodes under the graph metric."""
        return self._dist(self.node_point(u), self.node_point(v))

    def nearest_node(self, p) -> NodeId:
        # first-inserted node wins ties
        p = as_point(p)
        best, best_d = None, math.inf
        for nid, node in self._nodes.items():
            d = self._dist(p, node.point)
            if d < best_d:
                best, best_d = nid, d
        return best

    def edge(self, u: NodeId, v: NodeId) -> Edge | None:
        """Cheapest u -> v edge, if any."""
        best = None
        for e in self._adj.get(u, ()):
            if e.target == v and (best is None or e.weight < best.weight):
                best = e
        return best

    def iter_edges(self, path: Sequence[NodeId]) -> Iterator[tuple[NodeId, NodeId, Edge]]:
        for u, v in zip(path, path[1:]):
            e = self.edge(u, v)
            if e is None:
                raise InvalidGraph(f"no edge {u!r} -> {v!r}")
            yield u, v, e

    def path_cost(self, path: Sequence[NodeId]) -> float:
        return sum(e.weight for _, _, e in self.iter_edges(path))


def _normalize_nodes(nodes) -> dict[NodeId, Node]:
    out: dict[NodeId, Node] = {}
    for i, raw in enumerate(nodes):
        if isinstance(raw, Node):
            node = raw
        elif isinstance(raw, Point):
            node = Node(i, raw)
        else:
            try:
                first, second = raw
            except (TypeError, ValueError):
                raise InvalidGraph(f"cannot interpret node #{i}: {raw!r}") from None
            if isinstance(second, (Point, tuple, list)):
                node = Node(first, as_point(second))  # (id, (x, y))
            else:
                node = Node(i, as_point(raw))  # bare (x, y)
        if node.id in out:
            raise InvalidGraph(f"duplicate node id {node.id!r}")
        if not (math.isfinite(node.point.x) and math.isfinite(node.point.y)):
            raise InvalidGraph(f"node {node.id!r} has non-finite coordinates")
        out[node.id] = node
    return out


def _complete_edges(nodes: dict[NodeId, Node], dist) -> Iterator[Edge]:
    for u, nu in nodes.items():
        for v, nv in nodes.items():
            if u != v:
                yield Edge(u, v, dist(nu.point, nv.point))


def build_graph(
    nodes: Iterable,
    edges: Iterable | None = None,
    *,
    metric: str = "euclidean",
    undirected: bool = False,
) -> Graph:
    """
    Build an immutable Graph.

    Nodes may be ``Node`` objects, ``(id, (x, y))`` pairs, or bare ``(x, y)``
    tuples / ``Point``s (ids become list indices). Edges are ``(u, v)`` or
    ``(u, v, weight)``; a missing weight is the metric distance. With
    ``edges=None`` every ordered pair of distinct nodes is connected.
    """
    node_map = _normalize_nodes(nodes)
    if not node_map:
        raise EmptyInput("graph needs at least one node")
    dist = metric_fn(metric)

    if edges is None:
        edge_list = list(_complete_edges(node_map, dist))
    else:
        edge_list = []
        for raw in edges:
            e = _to_edge(raw, node_map, dist)
            edge_list.append(e)
            if undirected and e.source != e.target:
                edge_list.append(Edge(e.target, e.source, e.weight))

    adj: dict[NodeId, list[Edge]] = {}
    for e in edge_list:
        adj.setdefault(e.source, []).append(e)
    return Graph(node_map, {u: tuple(es) for u, es in adj.items()}, metric)


def _to_edge(raw, node_map: dict[NodeId, Node], dist) -> Edge:
    if isinstance(raw, Edge):
        u, v, w = raw.source, raw.target, raw.weight
    else:
        try:
            u, v, *rest = raw
        except (TypeError, ValueError):
            raise InvalidGraph(f"cannot interpret edge {raw!r}") from None
        if len(rest) > 1:
            raise InvalidGraph(f"cannot interpret edge {raw!r}")
        w = rest[0] if rest else None

    for nid in (u, v):
        if nid not in node_map:
            raise InvalidGraph(f"edge {u!r} -> {v!r} references unknown node {nid!r}")
    if w is None:
        w = dist(node_map[u].point, node_map[v].point)
    w = float(w)
    if not math.isfinite(w):
        raise InvalidGraph(f"edge {u!r} -> {v!r} has non-finite weight {w}")
    if w < 0:
        raise InvalidGraph(f"edge {u!r} -> {v!r} has negative weight {w}")
    return Edge(u, v, w)
