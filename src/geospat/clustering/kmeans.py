# clustering/kmeans.py
from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from geospat.domain.entities.geography import Point, as_point
from geospat.domain.errors import Cancelled, EmptyInput, InvalidParameter
from geospat.sim.deadline import CancelSignal
from geospat.sim.hooks import EngineHooks, NoopHooks
from geospat.sim.rng import as_generator


@dataclass(frozen=True)
class ClusterResult:
    centroids: tuple[Point, ...]
    assignment: tuple[int, ...]  # point index -> cluster id in [0, k)
    iterations: int
    converged: bool
    inertia: float

    @property
    def k(self) -> int:
        return len(self.centroids)

    def members(self, cluster_id: int) -> list[int]:
        return [i for i, c in enumerate(self.assignment) if c == cluster_id]

    def sizes(self) -> list[int]:
        counts = [0] * self.k
        for c in self.assignment:
            counts[c] += 1
        return counts


def _as_array(points) -> np.ndarray:
    X = np.array([tuple(as_point(p)) for p in points], dtype=float)
    if X.size == 0:
        raise EmptyInput("no points to cluster")
    if not np.isfinite(X).all():
        raise InvalidParameter("points must have finite coordinates")
    return X.reshape(-1, 2)


def _distances(X: np.ndarray, C: np.ndarray) -> np.ndarray:
    """(N, K) matrix of Euclidean distances."""
    diff = X[:, np.newaxis, :] - C[np.newaxis, :, :]
    return np.hypot(diff[..., 0], diff[..., 1])


def _assign(X: np.ndarray, C: np.ndarray) -> np.ndarray:
    # argmin returns the first minimum, i.e. the lowest cluster index on ties
    return np.argmin(_distances(X, C), axis=1)


def _init_centroids(X: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    idx = rng.choice(X.shape[0], size=k, replace=False)
    return X[np.sort(idx)].copy()


def _farthest_point(X: np.ndarray, C: np.ndarray) -> int:
    """Index of the point whose nearest centroid is farthest away (first on ties)."""
    return int(np.argmax(_distances(X, C).min(axis=1)))


def _validate(n: int, k: int, max_iterations: int, epsilon: float) -> None:
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise InvalidParameter(f"k must be a positive integer, got {k!r}")
    if k > n:
        raise InvalidParameter(f"k={k} exceeds the number of points ({n})")
    if not isinstance(max_iterations, (int, np.integer)) or max_iterations < 1:
        raise InvalidParameter(f"max_iterations must be a positive integer, got {max_iterations!r}")
    if not np.isfinite(epsilon) or epsilon < 0:
        raise InvalidParameter(f"epsilon must be a finite number >= 0, got {epsilon!r}")


def kmeans(
    points: Sequence,
    k: int,
    max_iterations: int = 300,
    epsilon: float = 1e-4,
    seed: int | np.random.Generator | None = 0,
    *,
    initial_centroids: Sequence | None = None,
    hooks: EngineHooks | None = None,
    deadline: CancelSignal | None = None,
) -> ClusterResult:
    """
    Partition planar points into k clusters (Lloyd iterations).

    Initial centroids are k distinct input points drawn without replacement
    from ``seed``; pass ``initial_centroids`` to start from known centers
    instead. An emptied cluster is re-seeded at the point farthest from
    every current centroid. Stops once no centroid moves by ``epsilon`` or
    more, or after ``max_iterations``.

    Args:
        points: (x, y) pairs or Points.
        k: Number of clusters, 1 <= k <= len(points).
        max_iterations: Upper bound on assign/update rounds.
        epsilon: Convergence threshold on the largest centroid shift.
        seed: int seed or a numpy Generator.
        initial_centroids: Optional k starting centers.
        hooks: Receives per-iteration progress.
        deadline: Checked once per iteration; raises Cancelled.

    Returns:
        ClusterResult with the final centroids and the last assignment.
    """
    X = _as_array(points)
    n = X.shape[0]
    _validate(n, k, max_iterations, epsilon)
    hooks = hooks or NoopHooks()
    t0 = time.perf_counter()

    if initial_centroids is not None:
        C = _as_array(initial_centroids)
        if C.shape[0] != k:
            raise InvalidParameter(f"expected {k} initial centroids, got {C.shape[0]}")
    else:
        C = _init_centroids(X, k, as_generator(seed))

    converged = False
    for i in range(max_iterations):
        if deadline is not None:
            try:
                deadline.check("kmeans")
            except Cancelled as exc:
                hooks.error("kmeans", reason=exc.reason, iteration=i)
                raise

        labels = _assign(X, C)

        new_C = np.empty_like(C)
        empty = []
        for c in range(k):
            members = X[labels == c]
            if len(members) == 0:
                empty.append(c)
                new_C[c] = C[c]
            else:
                new_C[c] = members.mean(axis=0)

        # re-seed one empty cluster at a time so two of them never land on the same point
        for c in empty:
            j = _farthest_point(X, np.delete(new_C, c, axis=0))
            new_C[c] = X[j]
            hooks.reseed(i=i, cluster=c, point_index=j)
        if empty:
            labels = _assign(X, new_C)

        shift = float(np.max(np.hypot(*(new_C - C).T)))
        C = new_C
        hooks.iteration(i=i, shift=shift, sizes=np.bincount(labels, minlength=k).tolist())
        if shift < epsilon:
            converged = True
            break

    labels = _assign(X, C)
    inertia = float(np.sum(_distances(X, C)[np.arange(n), labels] ** 2))
    result = ClusterResult(
        centroids=tuple(Point(float(x), float(y)) for x, y in C),
        assignment=tuple(int(c) for c in labels),
        iterations=i + 1,
        converged=converged,
        inertia=inertia,
    )
    hooks.cluster_end(
        k=k,
        iterations=result.iterations,
        converged=converged,
        inertia=inertia,
        wall_ms=(time.perf_counter() - t0) * 1000,
    )
    return result


def predict(centroids: Sequence, points: Sequence) -> list[int]:
    """Nearest-centroid label for each point (lowest cluster id on ties)."""
    C = _as_array(centroids)
    return _assign(_as_array(points), C).tolist()
