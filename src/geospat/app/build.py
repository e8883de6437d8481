# geospat/app/build.py
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from geospat.app.protocols import Clusterer, PathFinder
from geospat.clustering.kmeans import ClusterResult, kmeans
from geospat.config.models import EngineModel
from geospat.domain.entities.geography import NodeId, PathResult, Point
from geospat.domain.errors import EmptyInput
from geospat.domain.graph import Graph, build_graph
from geospat.io.engine_logging import EngineLogging
from geospat.runtime.registries import make_heuristic
from geospat.search.astar import Heuristic, find_path
from geospat.sim.deadline import Deadline
from geospat.sim.hooks import EngineHooks, NoopHooks
from geospat.sim.rng import RNGRegistry


@dataclass
class App(PathFinder, Clusterer):
    model: EngineModel
    graph: Graph | None
    heuristic: Heuristic
    hooks: EngineHooks
    rng: RNGRegistry

    def route(self, start: NodeId, goal: NodeId) -> PathResult:
        if self.graph is None:
            raise EmptyInput("no graph configured")
        d = self.model.search.deadline_s
        return find_path(
            self.graph,
            start,
            goal,
            heuristic=self.heuristic,
            hooks=self.hooks,
            deadline=Deadline.after(d) if d else None,
        )

    def cluster(self, points: Sequence[Point] | None = None, k: int | None = None) -> ClusterResult:
        cfg = self.model.cluster
        if points is None:
            if self.graph is None:
                raise EmptyInput("no points given and no graph configured")
            points = [n.point for n in self.graph.nodes.values()]
        k = cfg.k if k is None else k
        seed = cfg.seed if cfg.seed is not None else self.rng.seed_for("kmeans", k)
        return kmeans(
            points,
            k,
            cfg.max_iterations,
            cfg.epsilon,
            seed,
            hooks=self.hooks,
            deadline=Deadline.after(cfg.deadline_s) if cfg.deadline_s else None,
        )


def build(
    cfg: EngineModel | Mapping, *, use_logging: bool = True, hooks: EngineHooks | None = None
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, EngineModel) else EngineModel.model_validate(cfg)

    # 1) RNG
    rng_registry = RNGRegistry(model.seed, scenario=model.name)

    # 2) Hooks
    if hooks is None:
        hooks = (
            EngineLogging(
                run_id=model.run_id,
                level=model.log.level,
                debug=model.log.debug,
                sample_every=model.log.sample_every,
            )
            if use_logging
            else NoopHooks()
        )

    # 3) Graph, built once and shared by every route() call
    g = model.graph
    graph = (
        build_graph(g.nodes, g.edges, metric=g.metric, undirected=g.undirected) if g.nodes else None
    )

    # 4) Search strategy
    heuristic = make_heuristic(model.search.heuristic)

    return App(model, graph, heuristic, hooks, rng_registry)
