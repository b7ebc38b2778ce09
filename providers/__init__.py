from providers.base import StatusSource
from providers.live import BackendMode, LiveStatusClient
from providers.polling import PollingStatusClient, PollingView

__all__ = [
    "BackendMode",
    "LiveStatusClient",
    "PollingStatusClient",
    "PollingView",
    "StatusSource",
]
