"""Publish orchestrator — build, encode and submit one event per call."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from eventarc_publisher.events.contracts import build_envelope
from eventarc_publisher.events.encoding import EventFormat, encode

if TYPE_CHECKING:
    from eventarc_publisher.config import PublisherConfig
    from eventarc_publisher.destination import ChannelConnection
    from eventarc_publisher.events import EventGateway, PublishOutcome

logger = logging.getLogger(__name__)


class PublishStep(StrEnum):
    DESTINATION = "destination"
    BUILD = "build"
    ENCODE = "encode"
    PUBLISH = "publish"


class PublishOrchestrator:
    """Runs the linear publish pipeline against an injected gateway.

    Holds no per-call state, so concurrent ``send_publish_event`` calls only
    share the gateway.
    """

    def __init__(self, gateway: EventGateway, config: PublisherConfig) -> None:
        """Initialize with the gateway to publish through and envelope defaults."""
        self._gateway = gateway
        self._config = config

    async def send_publish_event(
        self,
        connection: ChannelConnection,
        payload: Any,
        *,
        event_format: EventFormat | str | None = None,
    ) -> PublishOutcome:
        """Publish ``payload`` to ``connection``. Failures are logged and re-raised."""
        step = PublishStep.DESTINATION
        try:
            destination = connection.name

            step = PublishStep.BUILD
            logger.info("Building CloudEvent — type=%s", self._config.event_type)
            envelope = build_envelope(
                payload,
                self._config.source,
                self._config.event_type,
                self._config.extensions,
            )

            step = PublishStep.ENCODE
            encoded = encode(
                envelope,
                self._config.event_format if event_format is None else event_format,
            )

            step = PublishStep.PUBLISH
            outcome = await self._gateway.publish(destination, encoded, envelope.id)
        except Exception as exc:
            logger.error(  # noqa: TRY400
                "An exception occurred while publishing — step=%s error=%s: %s",
                step,
                type(exc).__name__,
                exc,
            )
            raise

        logger.info(
            "Event published — id=%s destination=%s format=%s",
            outcome.event_id,
            outcome.destination,
            outcome.format,
        )
        return outcome
