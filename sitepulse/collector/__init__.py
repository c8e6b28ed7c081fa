"""Python emitter for the SitePulse ingestion endpoint."""

from sitepulse.collector.emitter import DEFAULT_FLUSH_INTERVAL, EventCollector

__all__ = ["DEFAULT_FLUSH_INTERVAL", "EventCollector"]
