from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field
from enum import Enum
import itertools
import secrets
import time


class ReturnStatus(str, Enum):
    """Return-to-parent progress of a topic instance"""
    NOT_RETURNED = "not_returned"
    SIGNALLED = "signalled"
    COMPLETED = "completed"


_id_counter = itertools.count()


def new_instance_id(type_name: str) -> str:
    """Build an instance id from the clock, a process counter and random bits"""
    return f"{type_name}({time.time_ns():x}.{next(_id_counter):x}.{secrets.token_hex(4)})"


class TopicInstance(BaseModel):
    """Persisted record backing one live topic node"""
    id: str = Field(description="Unique instance identifier")
    type_name: str = Field(description="Registered topic type this instance runs")
    parent_id: Optional[str] = Field(None, description="Instance that created this one")
    child_ids: List[str] = Field(default_factory=list, description="Owned child instance ids")
    state: Dict[str, Any] = Field(default_factory=dict, description="Topic-defined state blob")
    started: bool = Field(default=False)
    return_status: ReturnStatus = Field(default=ReturnStatus.NOT_RETURNED)
    return_args: Optional[Any] = Field(None, description="Arguments passed to return_to_parent")
    constructor_args: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        type_name: str,
        parent_id: Optional[str] = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> "TopicInstance":
        """Allocate a fresh, not yet begun instance"""
        return cls(
            id=new_instance_id(type_name),
            type_name=type_name,
            parent_id=parent_id,
            constructor_args=constructor_args or {}
        )

    @property
    def has_returned(self) -> bool:
        return self.return_status != ReturnStatus.NOT_RETURNED

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the instance for logs"""
        return {
            "instance_id": self.id,
            "topic_type": self.type_name,
            "parent_id": self.parent_id,
            "children": list(self.child_ids),
            "started": self.started,
            "return_status": self.return_status.value
        }


class ConversationTopicTable(BaseModel):
    """All live topic instances of one conversation"""
    instances: Dict[str, TopicInstance] = Field(default_factory=dict)
    root_id: Optional[str] = None

    def to_storage(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_storage(cls, data: Optional[Dict[str, Any]]) -> "ConversationTopicTable":
        if not data:
            return cls()
        return cls.model_validate(data)
