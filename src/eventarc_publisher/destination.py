"""Channel connection resource names."""

from __future__ import annotations

import re
from dataclasses import dataclass

from eventarc_publisher.errors import InvalidInputError

_NAME_PATTERN = re.compile(
    r"^projects/(?P<project>[^/]+)/locations/(?P<location>[^/]+)"
    r"/channelConnections/(?P<channel_connection>[^/]+)$"
)


@dataclass(frozen=True)
class ChannelConnection:
    """Address of an Eventarc channel connection."""

    project: str
    location: str
    channel_connection: str

    def __post_init__(self) -> None:
        for label, value in (
            ("project", self.project),
            ("location", self.location),
            ("channel connection", self.channel_connection),
        ):
            if not value or not value.strip():
                raise InvalidInputError(f"{label} must not be empty")
            if "/" in value:
                raise InvalidInputError(f"{label} must not contain '/': {value!r}")

    @property
    def name(self) -> str:
        return (
            f"projects/{self.project}/locations/{self.location}"
            f"/channelConnections/{self.channel_connection}"
        )

    @classmethod
    def parse(cls, name: str) -> ChannelConnection:
        """Split a full resource name back into its components."""
        match = _NAME_PATTERN.match(name)
        if match is None:
            raise InvalidInputError(f"not a channel connection name: {name!r}")
        return cls(**match.groupdict())

    def __str__(self) -> str:
        return self.name
