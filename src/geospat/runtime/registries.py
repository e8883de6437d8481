# runtime/registries.py
from collections.abc import Callable

from geospat.config.models import (
    HeuristicEuclideanModel,
    HeuristicHaversineModel,
    HeuristicMetricModel,
    HeuristicUnion,
    HeuristicZeroModel,
)
from geospat.domain.distance import point_euclidean, point_haversine_km
from geospat.domain.errors import InvalidParameter
from geospat.search.astar import Heuristic, straight_line, zero

HeuristicFactory = Callable[[HeuristicUnion, dict], Heuristic]

_heuristic_registry: dict[str, HeuristicFactory] = {}


def register_heuristic(kind: str):
    def deco(fn: HeuristicFactory):
        _heuristic_registry[kind] = fn
        return fn

    return deco


def make_heuristic(cfg: HeuristicUnion, *, deps: dict | None = None) -> Heuristic:
    try:
        factory = _heuristic_registry[cfg.kind]
    except KeyError:
        raise InvalidParameter(f"Unknown heuristic kind {cfg.kind!r}") from None
    return factory(cfg, deps or {})


@register_heuristic("straight_line")
def _make_straight_line(cfg: HeuristicMetricModel, deps):
    return straight_line


@register_heuristic("zero")
def _make_zero(cfg: HeuristicZeroModel, deps):
    return zero


@register_heuristic("euclidean")
def _make_euclidean(cfg: HeuristicEuclideanModel, deps):
    scale = cfg.scale

    def h(graph, u, goal):
        return point_euclidean(graph.node_point(u), graph.node_point(goal)) / scale

    return h


@register_heuristic("haversine")
def _make_haversine(cfg: HeuristicHaversineModel, deps):
    scale = cfg.scale

    def h(graph, u, goal):
        return point_haversine_km(graph.node_point(u), graph.node_point(goal)) / scale

    return h
