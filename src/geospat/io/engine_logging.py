# io/engine_logging.py
import json
import logging
import math
import sys

from geospat.sim.hooks import NoopHooks


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        # node ids may be arbitrary hashables
        return json.dumps(payload, default=repr)


def default_json_logger(name="geospat", level="INFO", stream=None):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stdout)
        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class EngineLogging(NoopHooks):
    """
    Structured JSON logs for search and clustering progress.
    """

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        sample_every: int = 1000,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug, self.sample_every = run_id, debug, max(1, sample_every)
        self.log = logger or default_json_logger(level=level)

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id, **extra}
        self.log.log(getattr(logging, level), msg, extra={"extra": payload})

    # search

    def search_start(self, *, start, goal, nodes, edges):
        self._emit("INFO", "search_start", start=start, goal=goal, nodes=nodes, edges=edges)

    def expand(self, node, *, g, f, qsize, expanded):
        if self.debug and (expanded % self.sample_every) == 0:
            self._emit("DEBUG", "expand", node=node, g=g, f=f, qsize=qsize, expanded=expanded)

    def search_end(self, *, start, goal, found, cost, expanded, length, wall_ms):
        self._emit(
            "INFO",
            "search_end",
            start=start,
            goal=goal,
            found=found,
            cost=None if math.isinf(cost) else cost,
            expanded=expanded,
            length=length,
            wall_ms=round(wall_ms, 3),
        )

    # clustering

    def iteration(self, *, i, shift, sizes):
        if self.debug and (i % self.sample_every) == 0:
            self._emit("DEBUG", "kmeans_iteration", i=i, shift=shift, sizes=sizes)

    def reseed(self, *, i, cluster, point_index):
        self._emit("WARNING", "kmeans_reseed", i=i, cluster=cluster, point_index=point_index)

    def cluster_end(self, *, k, iterations, converged, inertia, wall_ms):
        self._emit(
            "INFO",
            "kmeans_end",
            k=k,
            iterations=iterations,
            converged=converged,
            inertia=inertia,
            wall_ms=round(wall_ms, 3),
        )

    def error(self, stage: str, *, reason: str, **kw):
        level = "WARNING" if reason == "no_path" else "ERROR"
        self._emit(level, f"{stage}_error", reason=reason, **kw)
