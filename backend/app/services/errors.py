"""
Service Errors
--------------
Failure kinds raised by the service layer. Routers translate them into
HTTP responses; services never build HTTP errors themselves.
"""


class ServiceError(Exception):
    """Base class for expected, user-facing service failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """A user, profile, plan, challenge, day index or workout does not exist."""


class ConflictError(ServiceError):
    """A duplicate active plan or challenge enrollment."""


class InvalidStateError(ServiceError):
    """The record is not in a state that allows the operation."""


class UpstreamUnavailableError(ServiceError):
    """The external exercise provider failed or is not configured."""
