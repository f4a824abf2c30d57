from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
import time
import structlog

from topical.domain.context.instance_store import InstanceStore
from topical.domain.errors import ConversationAlreadyStartedError, ConversationNotStartedError
from topical.domain.models.activity import TurnInput
from topical.domain.topic.registry import TopicRegistry, TopicType, topic_registry
from topical.infrastructure.config.settings import TopicalSettings, get_settings
from topical.infrastructure.observability.logging import MetricsCollector, TopicLogger, metrics
from topical.infrastructure.observability.telemetry import Telemetry, TelemetryEventType, TelemetrySink
from topical.infrastructure.storage.base import Storage
from .turn_context import TurnContext

logger = structlog.get_logger(__name__)


class TurnResult(BaseModel):
    """Outcome of one processed turn"""
    conversation_key: str
    root_id: str
    started: bool = Field(default=False, description="True when this turn created the root topic")
    instance_count: int = 0
    orphans_collected: int = 0
    duration_ms: float = 0.0


class TopicOrchestrator:
    """Loads a conversation's topic tree, runs one turn through it and saves it

    The orchestrator does no locking: the host must not run two turns of the
    same conversation at once (see ConversationRunner).
    """

    def __init__(
        self,
        storage: Storage,
        registry: Optional[TopicRegistry] = None,
        telemetry_sink: Optional[TelemetrySink] = None,
        settings: Optional[TopicalSettings] = None,
        metrics_collector: Optional[MetricsCollector] = None
    ):
        self.storage = storage
        self.registry = registry or topic_registry
        self.telemetry = Telemetry(telemetry_sink)
        self.settings = settings or get_settings()
        self.metrics = metrics_collector or metrics
        self.topic_logger = TopicLogger("topical.orchestrator")

    def _store(self, conversation_key: str) -> InstanceStore:
        return InstanceStore(self.storage, conversation_key, self.settings.storage_prefix)

    def _context(self, store: InstanceStore, turn_input: Optional[TurnInput], channel: Optional[Any]) -> TurnContext:
        return TurnContext(
            store,
            self.registry,
            turn_input=turn_input,
            channel=channel,
            telemetry=self.telemetry,
            topic_logger=self.topic_logger,
            metrics=self.metrics,
            settings=self.settings
        )

    async def start_conversation(
        self,
        conversation_key: str,
        root_type: TopicType,
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None,
        channel: Optional[Any] = None,
        turn_input: Optional[TurnInput] = None
    ) -> str:
        """Create and begin the root topic of a new conversation"""

        store = self._store(conversation_key)
        await store.load()
        result = await self._run(
            store, turn_input, channel,
            root_type=root_type, begin_args=begin_args, constructor_args=constructor_args
        )
        return result.root_id

    async def run_turn(
        self,
        conversation_key: str,
        turn_input: TurnInput,
        channel: Optional[Any] = None
    ) -> TurnResult:
        """Dispatch one turn of input to an existing conversation"""

        store = self._store(conversation_key)
        await store.load()
        if store.root_id is None:
            raise ConversationNotStartedError(conversation_key)
        return await self._run(store, turn_input, channel)

    async def do_turn(
        self,
        conversation_key: str,
        turn_input: TurnInput,
        root_type: TopicType,
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None,
        channel: Optional[Any] = None
    ) -> TurnResult:
        """Begin the root on the first turn of a conversation, dispatch afterwards"""

        store = self._store(conversation_key)
        await store.load()
        if store.root_id is None:
            return await self._run(
                store, turn_input, channel,
                root_type=root_type, begin_args=begin_args, constructor_args=constructor_args
            )
        return await self._run(store, turn_input, channel)

    async def _run(
        self,
        store: InstanceStore,
        turn_input: Optional[TurnInput],
        channel: Optional[Any],
        root_type: Optional[TopicType] = None,
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> TurnResult:
        self.registry.freeze()
        context = self._context(store, turn_input, channel)
        conversation_key = store.conversation_key
        start_time = time.perf_counter()

        with structlog.contextvars.bound_contextvars(conversation_key=conversation_key):
            try:
                if root_type is not None:
                    await self._begin_root(context, root_type, begin_args, constructor_args)
                else:
                    await context.dispatch(store.root_id)

                root = store.get(store.root_id)
                await self.telemetry.emit(
                    TelemetryEventType.END_OF_TURN,
                    root.id,
                    root.type_name,
                    root.child_ids,
                    turn_input
                )

                orphans = self._collect_orphans(context)
                await store.save()

            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                self.metrics.increment_counter("turn.failed")
                self.topic_logger.log_turn(
                    conversation_key, store.root_id, len(store), duration_ms,
                    success=False, error=str(e)
                )
                raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.record_latency("turn", duration_ms)
        self.topic_logger.log_turn(conversation_key, store.root_id, len(store), duration_ms)

        return TurnResult(
            conversation_key=conversation_key,
            root_id=store.root_id,
            started=root_type is not None,
            instance_count=len(store),
            orphans_collected=orphans,
            duration_ms=duration_ms
        )

    async def _begin_root(
        self,
        context: TurnContext,
        root_type: TopicType,
        begin_args: Any,
        constructor_args: Optional[Dict[str, Any]]
    ) -> None:
        store = context.store
        if store.root_id is not None:
            raise ConversationAlreadyStartedError(store.conversation_key)

        root = context.create_instance(root_type, None, constructor_args)
        store.root_id = root.id

        # a root that returns during begin raises RootReturnedError
        await context.begin(root.id, begin_args)

        await self.telemetry.emit(
            TelemetryEventType.ASSIGN_ROOT,
            root.id,
            root.type_name,
            root.child_ids,
            context.turn_input
        )
        logger.info("Conversation started", root_id=root.id, topic_type=root.type_name)

    def _collect_orphans(self, context: TurnContext) -> int:
        """Log, and optionally delete, instances unreachable from the root"""

        store = context.store
        reachable = set(context.reachable_ids(store.root_id))
        orphans = [instance for instance in store if instance.id not in reachable]

        for orphan in orphans:
            self.topic_logger.log_orphan(orphan.id, orphan.type_name, orphan.parent_id)
            if self.settings.collect_orphans:
                store.delete(orphan.id)

        if orphans:
            self.metrics.increment_counter("topic.orphaned", len(orphans))
        return len(orphans)

    async def get_table(self, conversation_key: str):
        """Read the persisted table without running a turn"""

        store = self._store(conversation_key)
        return await store.load()

    async def reset_conversation(self, conversation_key: str) -> bool:
        """Forget a conversation's topic tree"""

        store = self._store(conversation_key)
        deleted = await self.storage.delete(store.storage_key)
        logger.info("Conversation reset", conversation_key=conversation_key, existed=deleted)
        return deleted
