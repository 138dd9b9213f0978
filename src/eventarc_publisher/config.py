"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)


@dataclass(frozen=True)
class AppConfig:
    log_level: str = field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_file: str = field(default_factory=lambda: _env("LOG_FILE"))


@dataclass(frozen=True)
class PublisherConfig:
    """Defaults for envelopes built and published by the CLI."""

    event_format: str = field(default_factory=lambda: _env("EVENTARC_EVENT_FORMAT", "binary"))
    source: str = field(default_factory=lambda: _env("EVENTARC_EVENT_SOURCE", "//provider/source"))
    event_type: str = field(default_factory=lambda: _env("EVENTARC_EVENT_TYPE", "provider.v1.event"))
    source_lang: str = field(default_factory=lambda: _env("EVENTARC_SOURCE_LANG", "python"))
    api_endpoint: str = field(default_factory=lambda: _env("EVENTARC_API_ENDPOINT"))

    @property
    def extensions(self) -> dict[str, str]:
        """Extension attributes stamped on every envelope."""
        if not self.source_lang:
            return {}
        return {"extsourcelang": self.source_lang}


@dataclass(frozen=True)
class Settings:
    app: AppConfig = field(default_factory=AppConfig)
    publisher: PublisherConfig = field(default_factory=PublisherConfig)


@lru_cache
def load_settings() -> Settings:
    """Read settings from the environment once per process."""
    return Settings()
