from core.aggregator import overall_state
from core.errors import DecodeError, FetchError, MutationFailed, StatusBoardError
from core.event_bus import EventBus, Subscription
from core.poller import Poller
from core.registry import SourceRegistry
from core.resource import Phase, ResourceState

__all__ = [
    "DecodeError",
    "EventBus",
    "FetchError",
    "MutationFailed",
    "Phase",
    "Poller",
    "ResourceState",
    "SourceRegistry",
    "StatusBoardError",
    "Subscription",
    "overall_state",
]
