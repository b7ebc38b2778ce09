from __future__ import annotations


class StatusBoardError(Exception):
    """Base class for errors surfaced by the status clients."""


class FetchError(StatusBoardError):
    """Transport or HTTP-level failure talking to a status endpoint.

    Deliberately carries no detail beyond the endpoint; the dashboard shows
    the same "unable to fetch status" banner for every cause.
    """

    def __init__(self, url: str = "", message: str = "request failed") -> None:
        super().__init__(message)
        self.url = url


class DecodeError(FetchError):
    """The endpoint answered, but the body was not the expected JSON shape."""


class MutationFailed(StatusBoardError):
    """A status update was rejected; the editor keeps the prior value."""

    def __init__(self, service_id: str, state: str) -> None:
        super().__init__(f"failed to update {service_id} to {state}")
        self.service_id = service_id
        self.state = state
