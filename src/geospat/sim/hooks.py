# sim/hooks.py
from typing import Protocol


class EngineHooks(Protocol):
    def search_start(self, *, start, goal, nodes, edges): ...
    def expand(self, node, *, g, f, qsize, expanded): ...
    def search_end(self, *, start, goal, found, cost, expanded, length, wall_ms): ...
    def iteration(self, *, i, shift, sizes): ...
    def reseed(self, *, i, cluster, point_index): ...
    def cluster_end(self, *, k, iterations, converged, inertia, wall_ms): ...
    def error(self, stage: str, *, reason: str, **kw): ...


class NoopHooks:
    def search_start(self, **_):
        pass

    def expand(self, *_, **__):
        pass

    def search_end(self, **_):
        pass

    def iteration(self, **_):
        pass

    def reseed(self, **_):
        pass

    def cluster_end(self, **_):
        pass

    def error(self, *_, **__):
        pass
