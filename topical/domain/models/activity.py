from typing import Dict, Any, Optional, Union, List
from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum


class ActivityType(str, Enum):
    """Kinds of turn input a channel can deliver"""
    MESSAGE = "message"
    CONVERSATION_UPDATE = "conversation_update"
    EVENT = "event"


class TurnInput(BaseModel):
    """One unit of external input delivered to the topic tree"""
    type: str = Field(default=ActivityType.MESSAGE.value, description="Message or other event kind")
    text: Optional[str] = Field(None, description="Text payload for messages")
    value: Optional[Any] = Field(None, description="Structured payload for non-text events")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def message(cls, text: str, **kwargs) -> "TurnInput":
        """Create a message input"""
        return cls(type=ActivityType.MESSAGE.value, text=text, **kwargs)

    @property
    def is_message(self) -> bool:
        return self.type == ActivityType.MESSAGE.value


class OutgoingMessage(BaseModel):
    """Reply produced by a topic"""
    type: str = Field(default=ActivityType.MESSAGE.value)
    text: Optional[str] = None
    suggested_actions: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


Output = Union[str, OutgoingMessage]


def to_outgoing(output: Output) -> OutgoingMessage:
    """Normalise whatever a topic sends into an OutgoingMessage"""
    if isinstance(output, OutgoingMessage):
        return output
    return OutgoingMessage(text=str(output))
