from .logging import setup_logging, TopicLogger, topic_logger, MetricsCollector, metrics
from .telemetry import (
    Telemetry, TelemetryEvent, TelemetryEventType, TelemetrySink,
    LoggingTelemetry, RecordingTelemetry, summarize
)

__all__ = [
    "setup_logging",
    "TopicLogger",
    "topic_logger",
    "MetricsCollector",
    "metrics",
    "Telemetry",
    "TelemetryEvent",
    "TelemetryEventType",
    "TelemetrySink",
    "LoggingTelemetry",
    "RecordingTelemetry",
    "summarize",
]
