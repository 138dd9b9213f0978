"""CLI entry point — publish one demo CloudEvent to a channel connection."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import TYPE_CHECKING

from eventarc_publisher.config import load_settings
from eventarc_publisher.destination import ChannelConnection
from eventarc_publisher.errors import PublisherError
from eventarc_publisher.events import CustomMessage, EventarcGateway, EventFormat
from eventarc_publisher.logging import configure_logging
from eventarc_publisher.pipeline import PublishOrchestrator

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Hello world from Python client library"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the positional channel connection components and options."""
    parser = argparse.ArgumentParser(
        prog="eventarc-publish",
        description="Publish a CloudEvent to an Eventarc channel connection.",
    )
    parser.add_argument("project_id", help="Google Cloud project id")
    parser.add_argument("region", help="Region of the channel connection")
    parser.add_argument("channel_connection", help="Channel connection id")
    parser.add_argument(
        "--format",
        dest="event_format",
        choices=[f.value for f in EventFormat],
        default=None,
        help="Wire format (defaults to EVENTARC_EVENT_FORMAT)",
    )
    parser.add_argument("--message", default=DEFAULT_MESSAGE, help="Message payload text")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """Publish once and return the process exit status."""
    settings = load_settings()
    configure_logging(settings.app.log_level, log_file=settings.app.log_file or None)

    print(
        f"ProjectId: {args.project_id} Region: {args.region} "
        f"ChannelConnection: {args.channel_connection}"
    )

    gateway = EventarcGateway(settings.publisher)
    orchestrator = PublishOrchestrator(gateway, settings.publisher)
    try:
        connection = ChannelConnection(args.project_id, args.region, args.channel_connection)
        print(f"Destination: {connection.name}")
        await orchestrator.send_publish_event(
            connection,
            CustomMessage(message=args.message),
            event_format=args.event_format,
        )
    except PublisherError:
        logger.exception("Failed to publish event")
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while publishing event")
        return 1
    finally:
        await gateway.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``eventarc-publish`` command."""
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    raise SystemExit(main())
