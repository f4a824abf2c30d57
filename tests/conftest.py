"""Shared fixtures and small topics used across the test modules"""

from typing import Any
import pytest
from pydantic import BaseModel

from topical.application.channel import BufferedChannel
from topical.domain.context.instance_store import InstanceStore
from topical.domain.models.activity import TurnInput
from topical.domain.models.topic_instance import TopicInstance
from topical.domain.orchestration.orchestrator import TopicOrchestrator
from topical.domain.orchestration.turn_context import TurnContext
from topical.domain.topic import Topic, TopicRegistry, register_builtin_topics
from topical.infrastructure.config.settings import TopicalSettings, reset_settings
from topical.infrastructure.observability.logging import MetricsCollector
from topical.infrastructure.observability.telemetry import RecordingTelemetry, Telemetry
from topical.infrastructure.storage.memory_storage import MemoryStorage


class Leaf(Topic):
    """Stays active until it hears "done", then returns its begin args"""

    async def on_begin(self, args: Any = None) -> None:
        self.state["args"] = args

    async def on_dispatch(self) -> None:
        self.state["turns"] = self.state.get("turns", 0) + 1
        if self.text == "done":
            self.return_to_parent(self.state["args"])


class Immediate(Topic):
    """Returns during on_begin"""

    async def on_begin(self, args: Any = None) -> None:
        self.return_to_parent({"immediate": args})


class Holder(Topic):
    """Begins the child named in its begin args and records what comes back"""

    async def on_begin(self, args: Any = None) -> None:
        args = args or {}
        self.state["returns"] = []
        if args.get("child"):
            await self.begin_child(args["child"], args.get("child_args"), args.get("child_constructor_args"))

    async def on_child_return(self, child: TopicInstance) -> None:
        value = child.return_args
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")
        self.state["returns"].append({"type": child.type_name, "value": value})
        self.child.clear()


class Relay(Topic):
    """Middle node: begins a Leaf and returns whatever the Leaf returns"""

    async def on_begin(self, args: Any = None) -> None:
        await self.begin_child(Leaf, args)

    async def on_child_return(self, child: TopicInstance) -> None:
        self.return_to_parent({"relayed": child.return_args})


TEST_TOPICS = (Leaf, Immediate, Holder, Relay)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for name in TopicalSettings.model_fields:
        monkeypatch.delenv(f"TOPICAL_{name.upper()}", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def registry():
    registry = TopicRegistry()
    register_builtin_topics(registry)
    registry.register_all(*TEST_TOPICS)
    return registry


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def settings():
    return TopicalSettings()


@pytest.fixture
def recorder():
    return RecordingTelemetry()


@pytest.fixture
def channel():
    return BufferedChannel()


@pytest.fixture
def metrics_collector():
    return MetricsCollector()


@pytest.fixture
def orchestrator(storage, registry, recorder, settings, metrics_collector):
    return TopicOrchestrator(
        storage,
        registry=registry,
        telemetry_sink=recorder,
        settings=settings,
        metrics_collector=metrics_collector
    )


@pytest.fixture
def make_context(storage, registry, channel, recorder, settings):
    """Build a TurnContext over a fresh conversation"""

    def factory(text: str = "hi", conversation_key: str = "conv") -> TurnContext:
        return TurnContext(
            InstanceStore(storage, conversation_key),
            registry,
            turn_input=TurnInput.message(text),
            channel=channel,
            telemetry=Telemetry(recorder),
            settings=settings
        )

    return factory
