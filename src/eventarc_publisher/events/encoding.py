"""Wire encodings for event envelopes: structured JSON text and protobuf binary."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Final

from cloudevents.conversion import to_json
from cloudevents.exceptions import GenericException
from cloudevents.http import CloudEvent
from google.cloud.eventarc_publishing_v1 import CloudEvent as ProtoCloudEvent
from google.protobuf import any_pb2
from google.protobuf.message import DecodeError
from pydantic import ValidationError

from eventarc_publisher.errors import EncodingError, UnsupportedFormatError
from eventarc_publisher.events.contracts import EventEnvelope

logger = logging.getLogger(__name__)

JSON_EVENT_CONTENT_TYPE: Final = "application/cloudevents+json"
PROTO_EVENT_CONTENT_TYPE: Final = "application/cloudevents+protobuf"
PROTO_EVENT_TYPE_URL: Final = "type.googleapis.com/io.cloudevents.v1.CloudEvent"

AttributeValue = ProtoCloudEvent.CloudEventAttributeValue


class EventFormat(StrEnum):
    TEXT = "text"
    BINARY = "binary"

    @classmethod
    def resolve(cls, value: EventFormat | str) -> EventFormat:
        """Coerce a configured value into a format, rejecting unknown ones."""
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFormatError(value) from None


@dataclass(frozen=True)
class EncodedEvent:
    """An envelope serialized for transport."""

    format: EventFormat
    data: bytes
    content_type: str
    type_url: str | None = None

    def as_text(self) -> str:
        """Return the JSON text of a text-format event."""
        if self.format is not EventFormat.TEXT:
            raise EncodingError("only text events have a string form")
        return self.data.decode("utf-8")

    def to_any(self) -> any_pb2.Any:
        """Wrap the binary event in a type-tagged container."""
        if self.format is not EventFormat.BINARY or self.type_url is None:
            raise EncodingError("only binary events can be wrapped in an Any container")
        return any_pb2.Any(type_url=self.type_url, value=self.data)


def _format_time(value: datetime) -> str:
    rendered = value.astimezone(UTC).isoformat()
    return rendered.replace("+00:00", "Z")


def _text_attributes(envelope: EventEnvelope) -> dict[str, Any]:
    attributes: dict[str, Any] = {
        "id": envelope.id,
        "source": envelope.source,
        "type": envelope.type,
        "specversion": envelope.specversion,
        "time": _format_time(envelope.time),
        "datacontenttype": envelope.datacontenttype,
    }
    attributes.update(envelope.extensions)
    return attributes


def _keep_data(data: Any) -> Any:
    # Payload is inlined as a JSON object, not a string.
    return data


def _encode_text(envelope: EventEnvelope) -> EncodedEvent:
    try:
        event = CloudEvent(_text_attributes(envelope), envelope.data)
        body = to_json(event, data_marshaller=_keep_data)
    except (GenericException, TypeError, ValueError) as exc:
        raise EncodingError(f"event {envelope.id} is not JSON serializable: {exc}") from exc
    return EncodedEvent(
        format=EventFormat.TEXT,
        data=body,
        content_type=JSON_EVENT_CONTENT_TYPE,
    )


def _encode_binary(envelope: EventEnvelope) -> EncodedEvent:
    attributes = {
        "time": AttributeValue(ce_timestamp=envelope.time),
        "datacontenttype": AttributeValue(ce_string=envelope.datacontenttype),
    }
    for name, value in envelope.extensions.items():
        attributes[name] = AttributeValue(ce_string=value)

    fields: dict[str, Any] = {
        "id": envelope.id,
        "source": envelope.source,
        "spec_version": envelope.specversion,
        "type": envelope.type,
        "attributes": attributes,
    }
    if envelope.data_json is not None:
        fields["text_data"] = envelope.data_json

    proto = ProtoCloudEvent(**fields)
    # Map entries are written in a stable order only with deterministic=True.
    body = ProtoCloudEvent.pb(proto).SerializeToString(deterministic=True)
    return EncodedEvent(
        format=EventFormat.BINARY,
        data=body,
        content_type=PROTO_EVENT_CONTENT_TYPE,
        type_url=PROTO_EVENT_TYPE_URL,
    )


def encode(envelope: EventEnvelope, event_format: EventFormat | str) -> EncodedEvent:
    """Serialize ``envelope`` in the requested wire format."""
    resolved = EventFormat.resolve(event_format)
    if resolved is EventFormat.TEXT:
        encoded = _encode_text(envelope)
    else:
        encoded = _encode_binary(envelope)
    logger.debug(
        "Encoded event id=%s format=%s bytes=%d",
        envelope.id,
        resolved,
        len(encoded.data),
    )
    return encoded


def _decode_text(data: bytes) -> EventEnvelope:
    try:
        body = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise EncodingError(f"text event is not valid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise EncodingError("text event must be a JSON object")

    known = {"id", "source", "type", "specversion", "time", "datacontenttype", "data"}
    fields = {key: body[key] for key in known if key in body}
    fields["extensions"] = {
        key: value for key, value in body.items() if key not in known
    }
    return EventEnvelope.model_validate(fields)


def _decode_binary(data: bytes) -> EventEnvelope:
    try:
        proto = ProtoCloudEvent.deserialize(data)
    except DecodeError as exc:
        raise EncodingError(f"binary event could not be parsed: {exc}") from exc

    fields: dict[str, Any] = {
        "id": proto.id,
        "source": proto.source,
        "type": proto.type,
        "specversion": proto.spec_version,
    }
    extensions: dict[str, str] = {}
    for name, value in proto.attributes.items():
        if name == "time":
            if "ce_timestamp" not in value:
                raise EncodingError("binary event time must be a timestamp attribute")
            fields["time"] = value.ce_timestamp
        elif "ce_string" not in value:
            raise EncodingError(f"binary event attribute {name!r} is not a string")
        elif name == "datacontenttype":
            fields["datacontenttype"] = value.ce_string
        else:
            extensions[name] = value.ce_string
    fields["extensions"] = extensions
    if "text_data" in proto:
        fields["data"] = json.loads(proto.text_data)
    return EventEnvelope.model_validate(fields)


def decode(encoded: EncodedEvent) -> EventEnvelope:
    """Parse an encoded event back into an envelope."""
    try:
        if encoded.format is EventFormat.TEXT:
            return _decode_text(encoded.data)
        return _decode_binary(encoded.data)
    except (ValidationError, json.JSONDecodeError) as exc:
        raise EncodingError(f"encoded event is not a valid envelope: {exc}") from exc
