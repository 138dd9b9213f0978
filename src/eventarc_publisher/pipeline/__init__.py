"""Publish pipeline orchestration."""

from eventarc_publisher.pipeline.orchestrator import PublishOrchestrator, PublishStep

__all__ = ["PublishOrchestrator", "PublishStep"]
