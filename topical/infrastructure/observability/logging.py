import structlog
import logging
import sys
from typing import Dict, Any, List, Optional
from datetime import datetime
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "topical"
) -> None:
    """Setup structured logging configuration"""

    # Configure Python logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    # Processors for structlog
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    # Add appropriate renderer based on format
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    # Configure structlog
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Set service name in context
    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=os.getenv("ENVIRONMENT", "development"),
        version=os.getenv("SERVICE_VERSION", "unknown")
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add service context to all log entries"""

    # Add timestamp if not present
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.utcnow().isoformat()

    # Add conversation key if a turn is in progress
    conversation_key = structlog.contextvars.get_contextvars().get("conversation_key")
    if conversation_key:
        event_dict["conversation_key"] = conversation_key

    return event_dict


class TopicLogger:
    """Specialized logger for topic lifecycle events"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_topic_event(
        self,
        event_type: str,
        topic_type: str,
        instance_id: str,
        children: Optional[List[str]] = None,
        **kwargs
    ):
        """Log begin/dispatch/child-return phase boundaries"""

        self.logger.debug(
            "topic_event",
            event_type=event_type,
            topic_type=topic_type,
            instance_id=instance_id,
            children=children or [],
            **kwargs
        )

    def log_return(
        self,
        instance_id: str,
        topic_type: str,
        parent_id: Optional[str],
        during: str
    ):
        """Log a topic returning to its parent"""

        self.logger.info(
            "topic_returned",
            instance_id=instance_id,
            topic_type=topic_type,
            parent_id=parent_id,
            during=during
        )

    def log_turn(
        self,
        conversation_key: str,
        root_id: Optional[str],
        instance_count: int,
        duration_ms: float,
        success: bool = True,
        error: Optional[str] = None
    ):
        """Log the outcome of one turn"""

        log = self.logger.info if success else self.logger.error
        log(
            "turn_completed" if success else "turn_failed",
            conversation_key=conversation_key,
            root_id=root_id,
            instance_count=instance_count,
            duration_ms=duration_ms,
            error=error
        )

    def log_orphan(
        self,
        instance_id: str,
        topic_type: str,
        parent_id: Optional[str]
    ):
        """Log an instance that is no longer reachable from the root"""

        self.logger.error(
            "orphaned_instance",
            instance_id=instance_id,
            topic_type=topic_type,
            parent_id=parent_id
        )


# Global logger instance
topic_logger = TopicLogger("topical")


class MetricsCollector:
    """Collect and export metrics"""

    def __init__(self):
        self.metrics: Dict[str, Any] = {}

    def record_latency(self, operation: str, duration_ms: float, tags: Optional[Dict[str, str]] = None):
        """Record operation latency"""

        key = f"latency.{operation}"
        if key not in self.metrics:
            self.metrics[key] = {
                "count": 0,
                "sum": 0,
                "min": float('inf'),
                "max": 0
            }

        self.metrics[key]["count"] += 1
        self.metrics[key]["sum"] += duration_ms
        self.metrics[key]["min"] = min(self.metrics[key]["min"], duration_ms)
        self.metrics[key]["max"] = max(self.metrics[key]["max"], duration_ms)

        topic_logger.logger.debug(
            "metric",
            metric_type="latency",
            operation=operation,
            duration_ms=duration_ms,
            tags=tags or {}
        )

    def increment_counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """Increment a counter metric"""

        if name not in self.metrics:
            self.metrics[name] = 0
        self.metrics[name] += value

        topic_logger.logger.debug(
            "metric",
            metric_type="counter",
            name=name,
            value=value,
            tags=tags or {}
        )

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics"""

        summary = {}
        for key, value in self.metrics.items():
            if isinstance(value, dict) and "count" in value:
                # Latency metric
                summary[key] = {
                    "count": value["count"],
                    "avg": value["sum"] / value["count"] if value["count"] > 0 else 0,
                    "min": value["min"] if value["min"] != float('inf') else 0,
                    "max": value["max"]
                }
            else:
                # Counter
                summary[key] = value

        return summary

    def reset(self):
        self.metrics.clear()


# Global metrics collector
metrics = MetricsCollector()
