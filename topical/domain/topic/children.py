from typing import Dict, Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .registry import TopicType
    from .topic import Topic


class ChildSlot:
    """At most one active child; setting a new one deletes the old one"""

    def __init__(self, topic: "Topic"):
        self.topic = topic

    @property
    def id(self) -> Optional[str]:
        child_ids = self.topic.instance.child_ids
        return child_ids[0] if child_ids else None

    def has(self) -> bool:
        return bool(self.topic.instance.child_ids)

    def set(self, child_id: str) -> None:
        self.clear()
        self.topic.instance.child_ids.append(child_id)

    def clear(self) -> None:
        """Delete the current child (and its descendants)"""
        for child_id in list(self.topic.instance.child_ids):
            self.topic.context.remove_child(self.topic.instance, child_id)

    async def begin(
        self,
        topic_type: "TopicType",
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        """Create and begin a child in this slot"""

        context = self.topic.context
        child = context.create_instance(topic_type, self.topic.instance.id, constructor_args)
        self.set(child.id)

        if await context.begin(child.id, begin_args):
            return child.id
        return None

    async def dispatch(self) -> bool:
        """Forward the turn to the child; False when there is none"""

        child_id = self.id
        if child_id is None:
            return False
        return await self.topic.context.dispatch(child_id)


class ChildArray:
    """Any number of children; the topic decides which ones get the turn"""

    def __init__(self, topic: "Topic"):
        self.topic = topic

    def list(self) -> List[str]:
        return list(self.topic.instance.child_ids)

    def active(self) -> List[str]:
        """Children that have been begun"""
        store = self.topic.context.store
        return [child_id for child_id in self.topic.instance.child_ids if store.get(child_id).started]

    def idle(self) -> List[str]:
        """Children created but not begun yet"""
        store = self.topic.context.store
        return [child_id for child_id in self.topic.instance.child_ids if not store.get(child_id).started]

    def add(self, child_id: str) -> None:
        if child_id not in self.topic.instance.child_ids:
            self.topic.instance.child_ids.append(child_id)

    def remove(self, child_id: str) -> None:
        """Detach and delete one child; raises InstanceNotFoundError for any other id"""
        self.topic.context.remove_child(self.topic.instance, child_id)

    def clear(self) -> None:
        for child_id in self.list():
            self.remove(child_id)

    async def create(
        self,
        topic_type: "TopicType",
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> str:
        """Create a child without beginning it"""

        child = self.topic.context.create_instance(topic_type, self.topic.instance.id, constructor_args)
        self.add(child.id)
        return child.id

    async def begin(
        self,
        topic_type: "TopicType",
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        child_id = await self.create(topic_type, constructor_args)
        if await self.topic.context.begin(child_id, begin_args):
            return child_id
        return None

    async def dispatch(self, child_id: str) -> bool:
        return await self.topic.context.dispatch(child_id)

    def __len__(self) -> int:
        return len(self.topic.instance.child_ids)

    def __iter__(self):
        return iter(self.list())
