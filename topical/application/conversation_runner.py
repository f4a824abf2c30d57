from typing import Dict, Any, Optional
import asyncio
import structlog

from topical.domain.models.activity import TurnInput
from topical.domain.orchestration.orchestrator import TopicOrchestrator, TurnResult
from topical.domain.topic.registry import TopicType
from .channel import Channel, ConsoleChannel

logger = structlog.get_logger(__name__)


class ConversationRunner:
    """Feeds turns to the orchestrator, one at a time per conversation

    Turns for different conversations run concurrently; turns for the same
    conversation wait on that conversation's lock.
    """

    def __init__(
        self,
        orchestrator: TopicOrchestrator,
        root_type: TopicType,
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ):
        self.orchestrator = orchestrator
        self.root_type = root_type
        self.begin_args = begin_args
        self.constructor_args = constructor_args
        self._locks: Dict[str, asyncio.Lock] = {}
        self._locks_lock = asyncio.Lock()
        self.turn_counts: Dict[str, int] = {}

    async def _lock_for(self, conversation_key: str) -> asyncio.Lock:
        async with self._locks_lock:
            lock = self._locks.get(conversation_key)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[conversation_key] = lock
            return lock

    async def handle(
        self,
        conversation_key: str,
        turn_input: TurnInput,
        channel: Optional[Channel] = None
    ) -> TurnResult:
        """Run one turn, beginning the root topic on the conversation's first turn"""

        lock = await self._lock_for(conversation_key)
        async with lock:
            result = await self.orchestrator.do_turn(
                conversation_key,
                turn_input,
                self.root_type,
                begin_args=self.begin_args,
                constructor_args=self.constructor_args,
                channel=channel
            )
            self.turn_counts[conversation_key] = self.turn_counts.get(conversation_key, 0) + 1
            return result

    async def end_conversation(self, conversation_key: str) -> bool:
        """Drop the conversation's tree and turn count

        The lock stays registered: a turn already waiting on it must keep
        excluding any turn that arrives after the reset.
        """

        lock = await self._lock_for(conversation_key)
        async with lock:
            deleted = await self.orchestrator.reset_conversation(conversation_key)
            self.turn_counts.pop(conversation_key, None)
        return deleted

    def get_active_conversations(self) -> Dict[str, int]:
        """Turns handled per conversation"""
        return dict(self.turn_counts)

    async def run_console(self, conversation_key: str = "console", prompt: str = "") -> None:
        """Read lines from stdin and run each as a turn until EOF or "quit" """

        channel = ConsoleChannel()
        logger.info("Console conversation started", conversation_key=conversation_key)

        # the first, empty turn lets the root topic greet the user
        await self.handle(conversation_key, TurnInput(type="conversation_update"), channel)

        while True:
            try:
                line = await asyncio.to_thread(input, prompt)
            except EOFError:
                break
            if line.strip().lower() in ("quit", "exit"):
                break
            channel.start_turn()
            await self.handle(conversation_key, TurnInput.message(line), channel)

        logger.info("Console conversation ended", conversation_key=conversation_key)
