from typing import Any, Awaitable, Callable, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
import structlog

from topical.domain.models.activity import TurnInput

logger = structlog.get_logger(__name__)


class TelemetryEventType(str, Enum):
    """Phase boundaries reported to a telemetry sink"""
    BEGIN_START = "begin.start"
    BEGIN_END = "begin.end"
    DISPATCH_START = "dispatch.start"
    DISPATCH_END = "dispatch.end"
    CHILD_RETURN_START = "child_return.start"
    CHILD_RETURN_END = "child_return.end"
    ASSIGN_ROOT = "assign_root"
    END_OF_TURN = "end_of_turn"


class TelemetryEvent(BaseModel):
    """Structured event describing one topic at one phase boundary"""
    type: TelemetryEventType
    turn_input: Optional[TurnInput] = None
    instance_id: str
    topic_type_name: str
    child_ids: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


TelemetrySink = Callable[[TelemetryEvent], Awaitable[None]]


class LoggingTelemetry:
    """Telemetry sink that writes every event to the structured log"""

    def __init__(self, logger_name: str = "topical.telemetry"):
        self.logger = structlog.get_logger(logger_name)

    async def __call__(self, event: TelemetryEvent) -> None:
        self.logger.info(
            "telemetry",
            event_type=event.type.value,
            instance_id=event.instance_id,
            topic_type=event.topic_type_name,
            children=event.child_ids,
            input_type=event.turn_input.type if event.turn_input else None,
            input_text=event.turn_input.text if event.turn_input else None
        )


class RecordingTelemetry:
    """Telemetry sink that keeps events in memory"""

    def __init__(self):
        self.events: List[TelemetryEvent] = []

    async def __call__(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def types(self) -> List[str]:
        return [event.type.value for event in self.events]

    def for_instance(self, instance_id: str) -> List[TelemetryEvent]:
        return [event for event in self.events if event.instance_id == instance_id]

    def clear(self):
        self.events.clear()


class Telemetry:
    """Emits events to an optional sink; a missing sink is a no-op"""

    def __init__(self, sink: Optional[TelemetrySink] = None):
        self.sink = sink

    @property
    def enabled(self) -> bool:
        return self.sink is not None

    async def emit(
        self,
        event_type: TelemetryEventType,
        instance_id: str,
        topic_type_name: str,
        child_ids: Optional[List[str]] = None,
        turn_input: Optional[TurnInput] = None
    ) -> None:
        """Send one event to the sink, if any"""

        if self.sink is None:
            return

        await self.sink(TelemetryEvent(
            type=event_type,
            turn_input=turn_input,
            instance_id=instance_id,
            topic_type_name=topic_type_name,
            child_ids=list(child_ids or [])
        ))


def summarize(events: List[TelemetryEvent]) -> Dict[str, Any]:
    """Count events per type"""

    counts: Dict[str, int] = {}
    for event in events:
        counts[event.type.value] = counts.get(event.type.value, 0) + 1
    return counts
