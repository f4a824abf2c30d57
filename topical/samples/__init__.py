"""Runnable sample bots; each module has a main() that chats on the console"""

from typing import Callable, Type

from topical.application.conversation_runner import ConversationRunner
from topical.domain.orchestration.orchestrator import TopicOrchestrator
from topical.domain.topic.registry import TopicRegistry
from topical.domain.topic.topic import Topic
from topical.infrastructure.config.settings import get_settings
from topical.infrastructure.observability.logging import setup_logging
from topical.infrastructure.storage.memory_storage import MemoryStorage
from topical.infrastructure.storage.sqlite_storage import SqliteStorage


async def run_sample(root_type: Type[Topic], register: Callable[[TopicRegistry], TopicRegistry]) -> None:
    """Chat with a sample bot on stdin/stdout"""

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.service_name)

    registry = register(TopicRegistry())
    storage = SqliteStorage(settings.sqlite_path) if settings.sqlite_path else MemoryStorage()

    orchestrator = TopicOrchestrator(storage, registry=registry, settings=settings)
    runner = ConversationRunner(orchestrator, root_type)
    try:
        await runner.run_console()
    finally:
        if isinstance(storage, SqliteStorage):
            storage.close()
