"""
Turn context: the begin/dispatch/return protocol for one turn.

Holds everything a topic can reach during a turn (input, channel, the
conversation's instance store) and implements the protocol primitives that
topics call into:

    create_instance  allocate a record under a parent
    begin            run on_begin; tear down at once if it returned
    dispatch         run on_dispatch on a started instance
    complete_return  detach + delete a returned instance, run the parent's
                     on_child_return, and continue upward while parents return

Behavior objects are cached per instance for the duration of the turn so a
parent that dispatches to a child handles that child's return on the same
object.
"""

from typing import Dict, Any, List, Optional

from topical.domain.context.instance_store import InstanceStore
from topical.domain.errors import InstanceNotFoundError, RootReturnedError, TopicNotStartedError
from topical.domain.models.activity import Output, TurnInput, to_outgoing
from topical.domain.models.topic_instance import ReturnStatus, TopicInstance
from topical.domain.topic.registry import TopicRegistry, TopicType
from topical.domain.topic.topic import Topic
from topical.infrastructure.config.settings import TopicalSettings, get_settings
from topical.infrastructure.observability.logging import TopicLogger, MetricsCollector
from topical.infrastructure.observability.telemetry import Telemetry, TelemetryEventType


class TurnContext:
    """Protocol engine bound to one conversation for one turn"""

    def __init__(
        self,
        store: InstanceStore,
        registry: TopicRegistry,
        turn_input: Optional[TurnInput] = None,
        channel: Optional[Any] = None,
        telemetry: Optional[Telemetry] = None,
        topic_logger: Optional[TopicLogger] = None,
        metrics: Optional[MetricsCollector] = None,
        settings: Optional[TopicalSettings] = None
    ):
        self.store = store
        self.registry = registry
        self.turn_input = turn_input
        self.channel = channel
        self.telemetry = telemetry or Telemetry()
        self.topic_logger = topic_logger or TopicLogger(__name__)
        self.metrics = metrics or MetricsCollector()
        self.settings = settings or get_settings()
        self.topics: Dict[str, Topic] = {}

    @property
    def conversation_key(self) -> str:
        return self.store.conversation_key

    async def send(self, output: Output) -> None:
        """Send a reply; without a channel the reply is dropped"""

        if self.channel is None:
            self.topic_logger.logger.warning(
                "Reply dropped, no channel for this turn",
                conversation_key=self.conversation_key
            )
            return
        await self.channel.send(to_outgoing(output))

    def topic_for(self, instance_id: str) -> Topic:
        """Get the behavior object for an instance, building it on first use"""

        topic = self.topics.get(instance_id)
        if topic is None:
            instance = self.store.get(instance_id)
            topic = self.registry.create(instance.type_name, instance.constructor_args)
            topic.bind(self, instance)
            self.topics[instance_id] = topic
        return topic

    def create_instance(
        self,
        topic_type: TopicType,
        parent_id: Optional[str] = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> TopicInstance:
        type_name = self.registry.name_of(topic_type)
        instance = self.store.create(type_name, parent_id, constructor_args)
        self.metrics.increment_counter("topic.created", tags={"topic_type": type_name})
        return instance

    def remove_child(self, parent: TopicInstance, child_id: str) -> None:
        """Detach a child from its parent and delete it with its descendants"""

        if child_id not in parent.child_ids:
            raise InstanceNotFoundError(child_id)
        parent.child_ids.remove(child_id)
        self._delete_subtree(child_id)

    def _delete_subtree(self, instance_id: str) -> None:
        if not self.store.contains(instance_id):
            return
        instance = self.store.delete(instance_id)
        self.topics.pop(instance_id, None)
        for child_id in instance.child_ids:
            self._delete_subtree(child_id)

    async def _emit(self, event_type: TelemetryEventType, instance: TopicInstance) -> None:
        self.topic_logger.log_topic_event(
            event_type.value,
            instance.type_name,
            instance.id,
            instance.child_ids
        )
        await self.telemetry.emit(
            event_type,
            instance.id,
            instance.type_name,
            instance.child_ids,
            self.turn_input
        )

    async def begin(self, instance_id: str, begin_args: Any = None) -> bool:
        """Begin an instance; return True if it is active afterwards"""

        instance = self.store.get(instance_id)
        topic = self.topic_for(instance_id)

        await self._emit(TelemetryEventType.BEGIN_START, instance)
        await topic.on_begin(begin_args)

        if instance.return_status == ReturnStatus.SIGNALLED:
            await self.complete_return(instance, during="begin")

        if instance.has_returned:
            return False

        instance.started = True
        self.metrics.increment_counter("topic.begun", tags={"topic_type": instance.type_name})
        await self._emit(TelemetryEventType.BEGIN_END, instance)
        return True

    async def dispatch(self, instance_id: str) -> bool:
        """Hand the turn to a started instance"""

        instance = self.store.get(instance_id)
        if not instance.started:
            raise TopicNotStartedError(instance_id)

        topic = self.topic_for(instance_id)

        await self._emit(TelemetryEventType.DISPATCH_START, instance)
        await topic.on_dispatch()

        if instance.return_status == ReturnStatus.SIGNALLED:
            await self.complete_return(instance, during="dispatch")

        await self._emit(TelemetryEventType.DISPATCH_END, instance)
        return True

    async def complete_return(self, instance: TopicInstance, during: str) -> None:
        """Propagate a signalled return to the parent, cascading upward"""

        if instance.parent_id is None:
            raise RootReturnedError(instance.id)

        parent = self.store.get(instance.parent_id)

        # leftover children of a returning topic go with it
        for child_id in list(instance.child_ids):
            self._delete_subtree(child_id)

        if instance.id in parent.child_ids:
            parent.child_ids.remove(instance.id)
        self.store.delete(instance.id)
        self.topics.pop(instance.id, None)
        instance.return_status = ReturnStatus.COMPLETED

        self.topic_logger.log_return(instance.id, instance.type_name, parent.id, during)
        self.metrics.increment_counter("topic.returned", tags={"topic_type": instance.type_name})

        parent_topic = self.topic_for(parent.id)

        await self._emit(TelemetryEventType.CHILD_RETURN_START, parent)
        await parent_topic.on_child_return(instance)

        if parent.return_status == ReturnStatus.SIGNALLED:
            await self.complete_return(parent, during="child_return")

        await self._emit(TelemetryEventType.CHILD_RETURN_END, parent)

    def reachable_ids(self, root_id: str) -> List[str]:
        """Ids reachable from the root through child links"""

        seen: List[str] = []
        pending = [root_id]
        while pending:
            instance_id = pending.pop()
            if instance_id in seen:
                continue
            instance = self.store.get(instance_id)
            seen.append(instance_id)
            pending.extend(instance.child_ids)
        return seen
