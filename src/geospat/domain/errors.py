# domain/errors.py


class GeoSpatError(Exception):
    """Base class for every error the engine raises."""


class InvalidGraph(GeoSpatError, ValueError):
    pass


class InvalidParameter(GeoSpatError, ValueError):
    pass


class EmptyInput(GeoSpatError, ValueError):
    pass


class NoPathFound(GeoSpatError, LookupError):
    """Search exhausted the reachable set without touching the goal."""

    def __init__(self, start, goal):
        super().__init__(f"no path from {start!r} to {goal!r}")
        self.start, self.goal = start, goal


class Cancelled(GeoSpatError, RuntimeError):
    def __init__(self, stage: str, reason: str = "deadline"):
        super().__init__(f"{stage} cancelled: {reason}")
        self.stage, self.reason = stage, reason
