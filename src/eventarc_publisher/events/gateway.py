"""Eventarc Publishing API gateway for channel connection events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.eventarc_publishing_v1 import (
    PublishChannelConnectionEventsRequest,
    PublisherAsyncClient,
)

from eventarc_publisher.errors import InvalidInputError, TransportError
from eventarc_publisher.events.encoding import EncodedEvent, EventFormat

if TYPE_CHECKING:
    from eventarc_publisher.config import PublisherConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishOutcome:
    """Acknowledgement of a single accepted publish call."""

    destination: str
    event_id: str
    format: EventFormat
    response: Any


def build_request(
    destination: str, encoded: EncodedEvent
) -> PublishChannelConnectionEventsRequest:
    """Place the encoded event in the request field matching its format."""
    if encoded.format is EventFormat.TEXT:
        return PublishChannelConnectionEventsRequest(
            channel_connection=destination,
            text_events=[encoded.as_text()],
        )
    return PublishChannelConnectionEventsRequest(
        channel_connection=destination,
        events=[encoded.to_any()],
    )


class EventarcGateway:
    """Publish encoded events through ``PublisherAsyncClient``.

    The client is created on first use with Application Default Credentials
    and shared by every subsequent call until ``close()``.
    """

    def __init__(self, config: PublisherConfig) -> None:
        """Initialize with publisher configuration."""
        self._config = config
        self._client: PublisherAsyncClient | None = None

    def _ensure_client(self) -> PublisherAsyncClient:
        """Lazily create the Eventarc publisher client."""
        if self._client is None:
            options = None
            if self._config.api_endpoint:
                options = ClientOptions(api_endpoint=self._config.api_endpoint)
            self._client = PublisherAsyncClient(client_options=options)
            logger.info(
                "Eventarc publisher client created — endpoint=%s",
                self._config.api_endpoint or "default",
            )
        return self._client

    async def publish(
        self, destination: str, encoded: EncodedEvent, event_id: str = ""
    ) -> PublishOutcome:
        """Send one encoded event. No retry is attempted on failure."""
        if not destination:
            raise InvalidInputError("destination must not be empty")

        request = build_request(destination, encoded)
        logger.info("Publishing message in Eventarc — destination=%s", destination)
        try:
            client = self._ensure_client()
            response = await client.publish_channel_connection_events(request=request)
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise TransportError(destination, exc) from exc

        logger.info("Message published successfully. Received response: %s", response)
        return PublishOutcome(
            destination=destination,
            event_id=event_id,
            format=encoded.format,
            response=response,
        )

    async def close(self) -> None:
        """Release the underlying transport."""
        if self._client is not None:
            await self._client.transport.close()
            self._client = None
