from __future__ import annotations

import itertools
import time
import uuid
from collections.abc import Callable
from typing import Protocol


class IdGenerator(Protocol):
    """Mints unique ids for new graph elements."""

    def __call__(self) -> str: ...


class CounterIdGenerator:
    """`node_<n>_<millis>` ids from a per-instance monotonic counter."""

    def __init__(
        self,
        prefix: str = "node",
        *,
        start: int = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._clock = clock

    def __call__(self) -> str:
        return f"{self._prefix}_{next(self._counter)}_{int(self._clock() * 1000)}"


class UuidIdGenerator:
    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix

    def __call__(self) -> str:
        return f"{self._prefix}{uuid.uuid4().hex}"
