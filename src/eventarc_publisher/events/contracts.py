"""Typed CloudEvents envelope and the payloads it carries."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Final
from urllib.parse import urlsplit
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from eventarc_publisher.errors import EncodingError, InvalidInputError

SPEC_VERSION: Final = "1.0"
JSON_CONTENT_TYPE: Final = "application/json"

CORE_ATTRIBUTES: Final = frozenset(
    {
        "id",
        "source",
        "specversion",
        "type",
        "datacontenttype",
        "dataschema",
        "subject",
        "time",
        "data",
        "data_base64",
    }
)
_EXTENSION_NAME = re.compile(r"^[a-z0-9]+$")


def _event_id() -> str:
    return str(uuid4())


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CustomMessage(BaseModel):
    """Payload delivered as the content of the demo CloudEvent."""

    message: str


class EventEnvelope(BaseModel):
    """One event occurrence, independent of the wire format it is sent in.

    The payload is held as its JSON text and extensions as sorted pairs, so a
    built envelope cannot be changed in place. ``data`` and ``extensions``
    hand out fresh copies or read-only views.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_event_id, min_length=1)
    source: str
    type: str
    time: datetime = Field(default_factory=_utc_now)
    specversion: str = SPEC_VERSION
    datacontenttype: str = JSON_CONTENT_TYPE
    extension_items: tuple[tuple[str, str], ...] = ()
    data_json: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _freeze_mutable_inputs(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        if "extensions" in values:
            extensions = values.pop("extensions") or {}
            if not isinstance(extensions, Mapping):
                raise ValueError("extensions must be a mapping of names to strings")
            values["extension_items"] = tuple(
                sorted(extensions.items(), key=lambda item: str(item[0]))
            )
        if "data" in values:
            try:
                values["data_json"] = dump_payload(values.pop("data"))
            except EncodingError as exc:
                raise ValueError(str(exc)) from exc
        return values

    @field_validator("source")
    @classmethod
    def _check_source(cls, value: str) -> str:
        if not value or value != value.strip() or any(ch.isspace() for ch in value):
            raise ValueError("source must be a non-empty URI reference")
        try:
            parts = urlsplit(value)
        except ValueError as exc:
            raise ValueError(f"source is not a valid URI: {exc}") from exc
        if not (parts.scheme or parts.netloc or parts.path):
            raise ValueError("source is not a valid URI")
        return value

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("type must not be empty")
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("extension_items")
    @classmethod
    def _check_extensions(
        cls, value: tuple[tuple[str, str], ...]
    ) -> tuple[tuple[str, str], ...]:
        for name, _ in value:
            if not _EXTENSION_NAME.match(name):
                raise ValueError(
                    f"extension name {name!r} must use lowercase letters and digits only"
                )
            if name in CORE_ATTRIBUTES:
                raise ValueError(f"extension name {name!r} shadows a core attribute")
        return value

    @property
    def extensions(self) -> Mapping[str, str]:
        """Read-only view of the extension attributes."""
        return MappingProxyType(dict(self.extension_items))

    @property
    def data(self) -> Any:
        """A fresh copy of the payload, decoded from its stored JSON text."""
        if self.data_json is None:
            return None
        return json.loads(self.data_json)


def dump_payload(payload: Any) -> str | None:
    """Serialize a payload to compact JSON text, or ``None`` for no payload."""
    if payload is None:
        return None
    try:
        return json.dumps(payload, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"payload is not JSON serializable: {exc}") from exc


def build_envelope(
    payload: Any,
    source: str,
    event_type: str,
    extensions: Mapping[str, str] | None = None,
    *,
    time: datetime | None = None,
) -> EventEnvelope:
    """Build a fresh envelope with a new id around ``payload``.

    Pydantic payloads are flattened to plain JSON values first. The payload is
    serialized here, so later changes by the caller do not leak into the
    envelope and a payload that is not JSON compatible fails with
    ``EncodingError`` before anything is encoded or sent.
    """
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json")
    data_json = dump_payload(payload)

    fields: dict[str, Any] = {
        "source": source,
        "type": event_type,
        "extensions": extensions or {},
        "data_json": data_json,
    }
    if time is not None:
        fields["time"] = time

    try:
        return EventEnvelope(**fields)
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc
