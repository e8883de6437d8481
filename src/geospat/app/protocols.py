from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from geospat.clustering.kmeans import ClusterResult
from geospat.domain.entities.geography import NodeId, PathResult, Point


@runtime_checkable
class PathFinder(Protocol):
    """
    Responsibilities:
      • Minimum-cost route between two node ids of a prebuilt graph.
      • Fresh search state per call; the graph is only read.
    """

    def route(self, start: NodeId, goal: NodeId) -> PathResult: ...


@runtime_checkable
class Clusterer(Protocol):
    """
    Responsibilities:
      • Partition a planar point set into k groups, reproducibly for a seed.
    """

    def cluster(
        self, points: Sequence[Point] | None = None, k: int | None = None
    ) -> ClusterResult: ...
