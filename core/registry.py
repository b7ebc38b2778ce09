from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from core.settings import Settings

if TYPE_CHECKING:
    from providers.base import StatusSource

SourceFactory = Callable[[Settings], Awaitable["StatusSource"]]


class SourceRegistry:
    """Central registry of status source factories, keyed by name.

    Wiring a new backend requires only registering a factory under the name
    used by ``Settings.source`` -- no changes to the presentation layer.
    """

    def __init__(self) -> None:
        self._factories: dict[str, SourceFactory] = {}

    def register(self, name: str, factory: SourceFactory) -> None:
        self._factories[name] = factory

    @property
    def names(self) -> list[str]:
        return sorted(self._factories)

    async def create(self, settings: Settings, name: str | None = None) -> StatusSource:
        key = name or settings.source
        try:
            factory = self._factories[key]
        except KeyError:
            raise ValueError(
                f"unknown status source {key!r} (expected one of {', '.join(self.names)})"
            ) from None
        return await factory(settings)
