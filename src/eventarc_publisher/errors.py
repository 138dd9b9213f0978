"""Failure taxonomy for building, encoding and publishing events."""

from __future__ import annotations

from typing import Any


class PublisherError(Exception):
    """Base class for failures raised while building or publishing events."""


class InvalidInputError(PublisherError):
    """Construction parameters are malformed. Not retryable."""


class UnsupportedFormatError(PublisherError):
    def __init__(self, event_format: Any):
        super().__init__(f"{event_format!r} is not a supported wire format")
        self.event_format = event_format


class EncodingError(PublisherError):
    """Serialization of the envelope or its payload failed."""


class TransportError(PublisherError):
    """The Eventarc API was unreachable or rejected the request."""

    def __init__(self, destination: str, cause: BaseException):
        super().__init__(f"publishing to {destination} failed: {cause}")
        self.destination = destination
        self.cause = cause
