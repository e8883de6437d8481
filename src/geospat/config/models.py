from math import isfinite
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    sample_every: int = 1  # emit every Nth expansion when debug is on

    @field_validator("sample_every")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("sample_every must be >= 1")
        return v


# ----------------- GRAPH ---------------------


class GraphModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    metric: Literal["euclidean", "haversine"] = "euclidean"
    undirected: bool = False
    # [x, y] or [id, [x, y]]
    nodes: list[Any] = Field(default_factory=list)
    # [u, v] or [u, v, weight]; None => complete graph
    edges: list[tuple[Any, Any] | tuple[Any, Any, float]] | None = None


# ----------------- HEURISTICS ---------------------


class HeuristicMetricModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["straight_line"] = "straight_line"


class HeuristicEuclideanModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["euclidean"] = "euclidean"
    scale: float = 1.0  # divide distance by this, e.g. a max speed

    @field_validator("scale")
    @classmethod
    def _scale_positive(cls, v: float) -> float:
        if not isfinite(v) or v <= 0:
            raise ValueError("scale must be a positive finite number")
        return v


class HeuristicHaversineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["haversine"] = "haversine"
    scale: float = 1.0

    @field_validator("scale")
    @classmethod
    def _scale_positive(cls, v: float) -> float:
        if not isfinite(v) or v <= 0:
            raise ValueError("scale must be a positive finite number")
        return v


class HeuristicZeroModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["zero"] = "zero"


HeuristicUnion = Annotated[
    HeuristicMetricModel | HeuristicEuclideanModel | HeuristicHaversineModel | HeuristicZeroModel,
    Field(discriminator="kind"),
]


# ------------------ ENGINE STAGES -----------------------------


class SearchModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    heuristic: HeuristicUnion = Field(default_factory=HeuristicMetricModel)
    deadline_s: float | None = None


class ClusterModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    k: int = 2
    max_iterations: int = 300
    epsilon: float = 1e-4
    seed: int | None = None  # None => derived from EngineModel.seed
    deadline_s: float | None = None

    @field_validator("k", "max_iterations")
    def _at_least_one(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return v

    @field_validator("epsilon")
    @classmethod
    def _nonneg(cls, v: float) -> float:
        if not isfinite(v) or v < 0:
            raise ValueError("epsilon must be a finite number >= 0")
        return v


class EngineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "geospat"
    run_id: str = "local"
    seed: int = 123
    log: LogModel = LogModel()
    graph: GraphModel = GraphModel()
    search: SearchModel = SearchModel()
    cluster: ClusterModel = ClusterModel()

    @model_validator(mode="after")
    def _check_deadlines(self):
        for stage in (self.search, self.cluster):
            d = stage.deadline_s
            if d is not None and (not isfinite(d) or d <= 0):
                raise ValueError("deadline_s must be a positive number of seconds")
        return self
