class ReplicaDashboardError(Exception):
    """Base class for errors raised inside the dashboard client."""


class MessageDecodeError(ReplicaDashboardError):
    """A streamed payload was not valid JSON or not a replica message."""


class AdminApiError(ReplicaDashboardError):
    """A poll of one admin resource failed."""

    def __init__(self, resource: str, reason: str):
        super().__init__(f"{resource}: {reason}")
        self.resource = resource
        self.reason = reason


class AdminResponseInvalid(AdminApiError):
    """The admin API answered, but not with the expected document."""
