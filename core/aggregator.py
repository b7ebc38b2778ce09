from __future__ import annotations

from collections.abc import Iterable

from models.status import ServiceState, ServiceStatus

# Evaluated in order, first match wins.
SEVERITY_PRECEDENCE: tuple[ServiceState, ...] = (
    ServiceState.MAJOR_OUTAGE,
    ServiceState.PARTIAL_OUTAGE,
    ServiceState.MAINTENANCE,
)


def overall_state(services: Iterable[ServiceStatus | ServiceState]) -> ServiceState:
    """Collapse per-service states into one overall state.

    Outages dominate maintenance, which dominates nominal operation.  An
    empty input is Operational.
    """
    present = {s.state if isinstance(s, ServiceStatus) else s for s in services}
    for state in SEVERITY_PRECEDENCE:
        if state in present:
            return state
    return ServiceState.OPERATIONAL
