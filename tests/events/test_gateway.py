"""Tests for the Eventarc publishing gateway."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.api_core.exceptions import PermissionDenied, ServiceUnavailable
from google.auth.exceptions import DefaultCredentialsError

from eventarc_publisher.config import PublisherConfig
from eventarc_publisher.errors import InvalidInputError, TransportError
from eventarc_publisher.events import (
    EventarcGateway,
    EventEnvelope,
    EventFormat,
    EventGateway,
    encode,
)
from eventarc_publisher.events.encoding import PROTO_EVENT_TYPE_URL
from eventarc_publisher.events.gateway import build_request

DESTINATION = "projects/p/locations/r/channelConnections/c"


def _mock_client(response: object | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock()
    client.publish_channel_connection_events = AsyncMock(
        return_value=response, side_effect=error
    )
    client.transport.close = AsyncMock()
    return client


def test_gateway_satisfies_protocol(publisher_config: PublisherConfig) -> None:
    assert isinstance(EventarcGateway(publisher_config), EventGateway)


def test_build_request_uses_text_events(envelope: EventEnvelope) -> None:
    encoded = encode(envelope, EventFormat.TEXT)
    request = build_request(DESTINATION, encoded)
    assert request.channel_connection == DESTINATION
    assert list(request.text_events) == [encoded.as_text()]
    assert len(request.events) == 0


def test_build_request_wraps_binary_events(envelope: EventEnvelope) -> None:
    encoded = encode(envelope, EventFormat.BINARY)
    request = build_request(DESTINATION, encoded)
    assert len(request.text_events) == 0
    assert len(request.events) == 1
    assert request.events[0].type_url == PROTO_EVENT_TYPE_URL
    assert request.events[0].value == encoded.data


async def test_publish_returns_outcome(
    publisher_config: PublisherConfig, envelope: EventEnvelope
) -> None:
    """A successful call returns the API response inside the outcome."""
    response = MagicMock()
    client = _mock_client(response=response)
    gateway = EventarcGateway(publisher_config)
    encoded = encode(envelope, EventFormat.BINARY)

    with patch("eventarc_publisher.events.gateway.PublisherAsyncClient", return_value=client):
        outcome = await gateway.publish(DESTINATION, encoded, envelope.id)

    assert outcome.response is response
    assert outcome.destination == DESTINATION
    assert outcome.event_id == envelope.id
    assert outcome.format is EventFormat.BINARY
    client.publish_channel_connection_events.assert_awaited_once()
    request = client.publish_channel_connection_events.await_args.kwargs["request"]
    assert request.channel_connection == DESTINATION


async def test_publish_reuses_client(
    publisher_config: PublisherConfig, envelope: EventEnvelope
) -> None:
    client = _mock_client()
    gateway = EventarcGateway(publisher_config)
    encoded = encode(envelope, EventFormat.TEXT)

    with patch(
        "eventarc_publisher.events.gateway.PublisherAsyncClient", return_value=client
    ) as client_cls:
        await gateway.publish(DESTINATION, encoded)
        await gateway.publish(DESTINATION, encoded)

    client_cls.assert_called_once_with(client_options=None)
    assert client.publish_channel_connection_events.await_count == 2  # noqa: PLR2004


async def test_publish_passes_endpoint_override(envelope: EventEnvelope) -> None:
    config = PublisherConfig(api_endpoint="localhost:8080")
    gateway = EventarcGateway(config)

    with patch(
        "eventarc_publisher.events.gateway.PublisherAsyncClient", return_value=_mock_client()
    ) as client_cls:
        await gateway.publish(DESTINATION, encode(envelope, EventFormat.TEXT))

    options = client_cls.call_args.kwargs["client_options"]
    assert options.api_endpoint == "localhost:8080"


@pytest.mark.parametrize(
    "error",
    [ServiceUnavailable("backend down"), PermissionDenied("no access")],
)
async def test_publish_wraps_api_errors_without_retry(
    publisher_config: PublisherConfig, envelope: EventEnvelope, error: Exception
) -> None:
    """API failures surface as TransportError after a single attempt."""
    client = _mock_client(error=error)
    gateway = EventarcGateway(publisher_config)

    with (
        patch("eventarc_publisher.events.gateway.PublisherAsyncClient", return_value=client),
        pytest.raises(TransportError) as exc_info,
    ):
        await gateway.publish(DESTINATION, encode(envelope, EventFormat.BINARY))

    assert exc_info.value.cause is error
    assert exc_info.value.__cause__ is error
    assert exc_info.value.destination == DESTINATION
    client.publish_channel_connection_events.assert_awaited_once()


async def test_publish_wraps_credential_errors(
    publisher_config: PublisherConfig, envelope: EventEnvelope
) -> None:
    gateway = EventarcGateway(publisher_config)
    error = DefaultCredentialsError("no credentials")

    with (
        patch("eventarc_publisher.events.gateway.PublisherAsyncClient", side_effect=error),
        pytest.raises(TransportError) as exc_info,
    ):
        await gateway.publish(DESTINATION, encode(envelope, EventFormat.BINARY))

    assert exc_info.value.cause is error


async def test_publish_rejects_empty_destination(
    publisher_config: PublisherConfig, envelope: EventEnvelope
) -> None:
    gateway = EventarcGateway(publisher_config)
    with (
        patch("eventarc_publisher.events.gateway.PublisherAsyncClient") as client_cls,
        pytest.raises(InvalidInputError),
    ):
        await gateway.publish("", encode(envelope, EventFormat.TEXT))
    client_cls.assert_not_called()


async def test_close_releases_transport(
    publisher_config: PublisherConfig, envelope: EventEnvelope
) -> None:
    client = _mock_client()
    gateway = EventarcGateway(publisher_config)

    with patch("eventarc_publisher.events.gateway.PublisherAsyncClient", return_value=client):
        await gateway.publish(DESTINATION, encode(envelope, EventFormat.TEXT))
        await gateway.close()
        await gateway.close()

    client.transport.close.assert_awaited_once()
