from typing import Dict, List, Any, Optional, Type, Union, TYPE_CHECKING
import structlog

from topical.domain.errors import (
    RegistryFrozenError, TopicRegistrationError, UnknownTopicTypeError
)

if TYPE_CHECKING:
    from .topic import Topic

logger = structlog.get_logger(__name__)

TopicType = Union[str, Type["Topic"]]


class TopicRegistry:
    """Registry mapping topic type names to topic classes

    Populate it at startup; the orchestrator freezes it on first use and any
    later registration fails.
    """

    def __init__(self):
        self.topics: Dict[str, Type["Topic"]] = {}
        self._names: Dict[Type["Topic"], str] = {}
        self.frozen = False

    def register(self, topic_class: Type["Topic"], name: Optional[str] = None) -> Type["Topic"]:
        """Register a topic class under its type name"""

        type_name = name or getattr(topic_class, "topic_name", None) or topic_class.__name__

        existing = self.topics.get(type_name)
        if existing is topic_class:
            return topic_class

        if self.frozen:
            raise RegistryFrozenError(
                f"Cannot register topic {type_name!r}: the registry is frozen after first use"
            )

        if existing is not None:
            raise TopicRegistrationError(
                f"Topic name {type_name!r} is already registered to {existing.__qualname__}"
            )

        self.topics[type_name] = topic_class
        self._names.setdefault(topic_class, type_name)

        logger.debug("Registered topic", topic_type=type_name, topic_class=topic_class.__qualname__)
        return topic_class

    def register_all(self, *topic_classes: Type["Topic"]) -> None:
        for topic_class in topic_classes:
            self.register(topic_class)

    def freeze(self) -> None:
        """Reject further registrations"""
        self.frozen = True

    def resolve(self, type_name: str) -> Type["Topic"]:
        """Get the class registered for a type name"""

        topic_class = self.topics.get(type_name)
        if topic_class is None:
            raise UnknownTopicTypeError(type_name)
        return topic_class

    def name_of(self, topic_type: TopicType) -> str:
        """Get the registered type name for a class or name"""

        if isinstance(topic_type, str):
            self.resolve(topic_type)
            return topic_type

        name = self._names.get(topic_type)
        if name is None:
            raise UnknownTopicTypeError(getattr(topic_type, "__qualname__", repr(topic_type)))
        return name

    def create(self, type_name: str, constructor_args: Optional[Dict[str, Any]] = None) -> "Topic":
        """Build a fresh behavior object for a type name"""

        return self.resolve(type_name)(**(constructor_args or {}))

    def list_topics(self) -> List[str]:
        return sorted(self.topics)

    def __contains__(self, topic_type: TopicType) -> bool:
        if isinstance(topic_type, str):
            return topic_type in self.topics
        return topic_type in self._names


# Process-wide registry
topic_registry = TopicRegistry()


def register_topic(topic_class: Optional[Type["Topic"]] = None, *, name: Optional[str] = None):
    """Class decorator registering a topic in the process-wide registry"""

    def decorator(cls: Type["Topic"]) -> Type["Topic"]:
        return topic_registry.register(cls, name)

    if topic_class is not None:
        return decorator(topic_class)
    return decorator
