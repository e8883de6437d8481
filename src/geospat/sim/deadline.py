# sim/deadline.py
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Protocol

from geospat.domain.errors import Cancelled


class CancelSignal(Protocol):
    def expired(self) -> bool: ...
    def check(self, stage: str) -> None: ...


@dataclass(frozen=True)
class Deadline:
    expires_at: float  # time.perf_counter() reading

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        return cls(time.perf_counter() + seconds)

    def remaining(self) -> float:
        return self.expires_at - time.perf_counter()

    def expired(self) -> bool:
        return time.perf_counter() >= self.expires_at

    def check(self, stage: str) -> None:
        if self.expired():
            raise Cancelled(stage, "deadline")


class CancelToken:
    """Flag another thread can raise to stop a running computation."""

    def __init__(self):
        self._ev = threading.Event()

    def cancel(self) -> None:
        self._ev.set()

    def expired(self) -> bool:
        return self._ev.is_set()

    def check(self, stage: str) -> None:
        if self._ev.is_set():
            raise Cancelled(stage, "cancelled")
