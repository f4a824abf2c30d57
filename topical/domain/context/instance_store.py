from typing import Dict, Any, Iterator, Optional
import structlog

from topical.domain.errors import InstanceNotFoundError
from topical.domain.models.topic_instance import ConversationTopicTable, TopicInstance
from topical.infrastructure.storage.base import Storage

logger = structlog.get_logger(__name__)


class InstanceStore:
    """Topic instances of a single conversation, loaded from and saved to storage"""

    def __init__(self, storage: Storage, conversation_key: str, key_prefix: str = "topical/"):
        self.storage = storage
        self.conversation_key = conversation_key
        self.storage_key = f"{key_prefix}{conversation_key}"
        self.table = ConversationTopicTable()

    async def load(self) -> ConversationTopicTable:
        """Read the persisted table for this conversation"""

        self.table = ConversationTopicTable.from_storage(await self.storage.read(self.storage_key))

        logger.debug(
            "Loaded topic table",
            conversation_key=self.conversation_key,
            instances=len(self.table.instances)
        )
        return self.table

    async def save(self) -> None:
        """Write the table back to storage"""

        await self.storage.write(self.storage_key, self.table.to_storage())

    @property
    def root_id(self) -> Optional[str]:
        return self.table.root_id

    @root_id.setter
    def root_id(self, instance_id: Optional[str]):
        self.table.root_id = instance_id

    def create(
        self,
        type_name: str,
        parent_id: Optional[str] = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> TopicInstance:
        """Insert a fresh, not yet started instance"""

        instance = TopicInstance.create(type_name, parent_id, constructor_args)
        self.table.instances[instance.id] = instance
        return instance

    def get(self, instance_id: str) -> TopicInstance:
        """Get an instance, failing loudly when it is missing"""

        instance = self.table.instances.get(instance_id)
        if instance is None:
            raise InstanceNotFoundError(instance_id)
        return instance

    def contains(self, instance_id: str) -> bool:
        return instance_id in self.table.instances

    def delete(self, instance_id: str) -> TopicInstance:
        """Remove an instance; the caller must already have detached it from its parent"""

        instance = self.table.instances.pop(instance_id, None)
        if instance is None:
            raise InstanceNotFoundError(instance_id)
        return instance

    def __iter__(self) -> Iterator[TopicInstance]:
        return iter(list(self.table.instances.values()))

    def __len__(self) -> int:
        return len(self.table.instances)
