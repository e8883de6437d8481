from collections.abc import Hashable
from dataclasses import dataclass

NodeId = Hashable


# Core geometry types shared by graph, search and clustering
@dataclass(frozen=True)
class Point:
    x: float  # planar x, or longitude in degrees
    y: float  # planar y, or latitude in degrees

    @property
    def lon(self) -> float:
        return self.x

    @property
    def lat(self) -> float:
        return self.y

    def __iter__(self):
        yield self.x
        yield self.y


@dataclass(frozen=True)
class Node:
    id: NodeId
    point: Point


@dataclass(frozen=True)
class Edge:
    source: NodeId
    target: NodeId
    weight: float


@dataclass(frozen=True)
class PathResult:
    nodes: tuple[NodeId, ...]
    cost: float
    expanded: int = 0  # nodes popped from the open set and closed

    def __len__(self) -> int:
        return len(self.nodes)


def as_point(p) -> Point:
    if isinstance(p, Point):
        return p
    x, y = p
    return Point(float(x), float(y))
