"""Error taxonomy shared by the services, the HTTP layer and the client."""

from __future__ import annotations

from typing import Any


class AlphabetAppError(Exception):
    """Base class for all application errors."""


class NotFoundError(AlphabetAppError):
    """A referenced alphabet, letter or session id does not exist."""

    def __init__(self, resource: str, id: Any) -> None:
        self.resource = resource
        self.id = id
        super().__init__(f"{resource.capitalize()} with id {id} not found")

    def to_detail(self) -> dict:
        return {"error": "not_found", "resource": self.resource, "id": self.id}


class ValidationFailure(AlphabetAppError):
    """Malformed input or an update that would break a session invariant."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TransportFailure(AlphabetAppError):
    """The RPC boundary was unreachable, timed out or answered unexpectedly."""

    def __init__(
        self, message: str, *, timed_out: bool = False, status_code: int | None = None
    ) -> None:
        self.message = message
        self.timed_out = timed_out
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "AlphabetAppError",
    "NotFoundError",
    "ValidationFailure",
    "TransportFailure",
]
