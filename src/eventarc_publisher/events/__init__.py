"""Event envelopes, wire encodings and the publishing gateway."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from eventarc_publisher.events.contracts import CustomMessage, EventEnvelope, build_envelope
from eventarc_publisher.events.encoding import EncodedEvent, EventFormat, decode, encode
from eventarc_publisher.events.gateway import EventarcGateway, PublishOutcome


@runtime_checkable
class EventGateway(Protocol):
    """Protocol for submitting encoded events to a remote destination."""

    async def publish(
        self, destination: str, encoded: EncodedEvent, event_id: str = ""
    ) -> PublishOutcome:
        """Submit one encoded event and return the acknowledgement."""
        ...


__all__ = [
    "CustomMessage",
    "EncodedEvent",
    "EventEnvelope",
    "EventFormat",
    "EventGateway",
    "EventarcGateway",
    "PublishOutcome",
    "build_envelope",
    "decode",
    "encode",
]
