"""Shared fixtures for eventarc_publisher tests."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from eventarc_publisher.config import PublisherConfig
from eventarc_publisher.destination import ChannelConnection
from eventarc_publisher.events import EventEnvelope, build_envelope

FIXED_TIME = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=UTC)


@pytest.fixture
def publisher_config() -> PublisherConfig:
    return PublisherConfig(
        event_format="binary",
        source="//provider/source",
        event_type="provider.v1.event",
        source_lang="python",
        api_endpoint="",
    )


@pytest.fixture
def connection() -> ChannelConnection:
    return ChannelConnection("p", "r", "c")


@pytest.fixture
def envelope() -> EventEnvelope:
    return build_envelope(
        {"message": "Hello world"},
        "//provider/source",
        "provider.v1.event",
        {"extsourcelang": "python"},
        time=FIXED_TIME,
    )
