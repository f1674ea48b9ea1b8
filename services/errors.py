"""
Error taxonomy shared by the services and rendered by the API layer.
"""

from typing import Any, Dict, List


class ServiceError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(ServiceError):
    """A required field is missing or a value is not acceptable."""

    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class StoreError(ServiceError):
    """The record store rejected a query or a write."""


class GatewayError(ServiceError):
    """An upstream service (payment gateway, blob store, image CDN) failed."""


class AggregateError(ServiceError):
    """Several concurrent operations failed; every message is kept."""

    def __init__(self, messages: List[str]):
        super().__init__("; ".join(messages))
        self.messages = list(messages)

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.messages}


class LinkError(AggregateError):
    """Artist links could not be created for a song that already exists."""

    def __init__(self, song_id: Any, messages: List[str]):
        super().__init__(messages)
        self.song_id = song_id
        self.message = f"Failed to link associate artists with current song {song_id}"

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.message, "details": self.messages}
