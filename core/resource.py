from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

from core.errors import FetchError

T = TypeVar("T")


class Phase(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
    STALE = "stale"
    # Source answered with nothing to show; never rendered as an all-clear.
    EMPTY = "empty"


@dataclass(frozen=True)
class ResourceState(Generic[T]):
    """Latest known state of one polled resource.

    ``data`` is the last successful payload and survives later failures;
    ``error`` is the most recent failure and is cleared by the next success.
    """

    data: T | None = None
    error: FetchError | None = None
    fetched_at: datetime | None = None

    @property
    def phase(self) -> Phase:
        if self.data is None:
            return Phase.ERROR if self.error is not None else Phase.LOADING
        return Phase.STALE if self.error is not None else Phase.READY

    def succeeded(self, data: T) -> ResourceState[T]:
        return ResourceState(data=data, error=None, fetched_at=datetime.now(timezone.utc))

    def failed(self, error: FetchError) -> ResourceState[T]:
        return replace(self, error=error)
