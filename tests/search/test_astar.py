import math
import threading
from itertools import permutations

import pytest

from geospat.domain.errors import Cancelled, InvalidGraph, NoPathFound
from geospat.domain.graph import build_graph
from geospat.search.astar import find_path, zero
from geospat.sim.deadline import CancelToken, Deadline
from geospat.sim.hooks import NoopHooks

# ---------- Fixtures


@pytest.fixture
def grid_graph():
    """
    4x3 lattice, unit spacing, undirected, with a costly shortcut row.

        8 - 9 - 10 - 11
        |   |   |    |
        4 - 5 - 6 -  7
        |   |   |    |
        0 - 1 - 2 -  3
    """
    pts = [(x, y) for y in range(3) for x in range(4)]
    edges = []
    for i, (x, y) in enumerate(pts):
        if x < 3:
            w = 5.0 if y == 1 else 1.0  # middle row is slow
            edges.append((i, i + 1, w))
        if y < 2:
            edges.append((i, i + 4, 1.0))
    return build_graph(pts, edges, undirected=True)


def _brute_force(graph, start, goal):
    if start == goal:
        return 0.0
    best = math.inf
    others = [n for n in graph.nodes if n not in (start, goal)]
    for r in range(len(others) + 1):
        for mid in permutations(others, r):
            path = (start, *mid, goal)
            try:
                best = min(best, graph.path_cost(path))
            except InvalidGraph:
                continue
    return best


# ---------- Core behaviour


def test_start_equals_goal(grid_graph):
    res = find_path(grid_graph, 5, 5)
    assert res.nodes == (5,)
    assert res.cost == 0.0
    assert res.expanded == 0


def test_matches_brute_force_on_small_graph():
    pts = [(0, 0), (2, 1), (4, 0), (1, 3), (3, 3), (5, 2)]
    edges = [
        (0, 1, 2.5),
        (0, 3, 3.5),
        (1, 2, 2.3),
        (1, 4, 2.4),
        (3, 4, 2.0),
        (4, 5, 2.3),
        (2, 5, 2.3),
        (1, 3, 2.3),
        (0, 2, 9.0),
    ]
    g = build_graph(pts, edges, undirected=True)
    for s in g.nodes:
        for t in g.nodes:
            res = find_path(g, s, t)
            assert res.cost == pytest.approx(_brute_force(g, s, t), abs=0)
            assert res.nodes[0] == s and res.nodes[-1] == t
            if s != t:
                assert g.path_cost(res.nodes) == pytest.approx(res.cost)


def test_tiny_weights_still_pick_cheapest_route():
    # co-located nodes, so the heuristic is 0 and only weights decide
    g = build_graph([(0, 0)] * 3, [(0, 2, 1e-12), (0, 1, 1e-14), (1, 2, 1e-14)])
    for s in g.nodes:
        for t in g.nodes:
            if s <= t:
                res = find_path(g, s, t)
                assert res.cost == pytest.approx(_brute_force(g, s, t), abs=0)
    res = find_path(g, 0, 2)
    assert res.nodes == (0, 1, 2)
    assert res.cost == pytest.approx(2e-14, abs=0)


def test_none_is_a_usable_node_id():
    g = build_graph(
        [("s", (0, 0)), (None, (1, 0)), ("t", (2, 0))],
        [("s", None), (None, "t")],
    )
    res = find_path(g, "s", "t")
    assert res.nodes == ("s", None, "t")
    assert res.cost == pytest.approx(2.0)


def test_avoids_expensive_row(grid_graph):
    res = find_path(grid_graph, 4, 7)
    # going around through either outer row costs 5, straight across costs 15
    assert res.cost == pytest.approx(5.0)
    assert res.nodes[0] == 4 and res.nodes[-1] == 7


def test_zero_heuristic_gives_same_cost(grid_graph):
    assert find_path(grid_graph, 0, 11, heuristic=zero).cost == pytest.approx(
        find_path(grid_graph, 0, 11).cost
    )


def test_unreachable_goal_raises_no_path():
    g = build_graph([(0, 0), (1, 0), (5, 5), (6, 5)], [(0, 1), (2, 3)], undirected=True)
    with pytest.raises(NoPathFound) as info:
        find_path(g, 0, 3)
    assert info.value.start == 0 and info.value.goal == 3


def test_directed_edges_are_respected():
    g = build_graph([(0, 0), (1, 0)], [(0, 1)])
    assert find_path(g, 0, 1).nodes == (0, 1)
    with pytest.raises(NoPathFound):
        find_path(g, 1, 0)


def test_unknown_ids_rejected(grid_graph):
    with pytest.raises(InvalidGraph):
        find_path(grid_graph, 0, 99)


def test_complete_euclidean_graph_takes_direct_edge():
    nodes = [(0, 0), (10, 10), (1, 1), (2, 2), (3, 3), (4, 4), (5, 5)]
    g = build_graph(nodes)
    res = find_path(g, 0, 1)
    assert res.nodes == (0, 1)
    assert res.cost == pytest.approx(14.142, abs=1e-3)


def test_cycles_expand_each_node_at_most_once():
    # dense cycle with many equal-cost alternatives
    n = 30
    pts = [(math.cos(2 * math.pi * i / n), math.sin(2 * math.pi * i / n)) for i in range(n)]
    edges = [(i, (i + 1) % n) for i in range(n)] + [(i, (i + 2) % n) for i in range(n)]
    g = build_graph(pts, edges, undirected=True)
    res = find_path(g, 0, n // 2)
    assert res.expanded <= n


def test_repeated_searches_are_deterministic_and_share_graph(grid_graph):
    results = []

    def worker():
        results.append(find_path(grid_graph, 0, 11).nodes)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(results)) == 1


# ---------- Cancellation & hooks


def test_expired_deadline_cancels(grid_graph):
    with pytest.raises(Cancelled) as info:
        find_path(grid_graph, 0, 11, deadline=Deadline.after(-1.0))
    assert info.value.stage == "find_path"


def test_cancel_token(grid_graph):
    token = CancelToken()
    token.cancel()
    with pytest.raises(Cancelled):
        find_path(grid_graph, 0, 11, deadline=token)


class TraceHooks(NoopHooks):
    def __init__(self):
        self.expanded = []
        self.ends = []
        self.errors = []

    def expand(self, node, **kw):
        self.expanded.append(node)

    def search_end(self, **kw):
        self.ends.append(kw)

    def error(self, stage, **kw):
        self.errors.append((stage, kw["reason"]))


def test_hooks_see_expansions_and_result(grid_graph):
    hooks = TraceHooks()
    res = find_path(grid_graph, 0, 3, hooks=hooks)
    assert hooks.expanded[0] == 0
    assert len(hooks.expanded) == res.expanded == len(set(hooks.expanded))
    assert hooks.ends[-1]["found"] and hooks.ends[-1]["cost"] == res.cost


def test_hooks_see_no_path():
    hooks = TraceHooks()
    g = build_graph([(0, 0), (1, 1)], [])
    with pytest.raises(NoPathFound):
        find_path(g, 0, 1, hooks=hooks)
    assert hooks.errors == [("find_path", "no_path")]
