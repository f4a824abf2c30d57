"""
Tests for TopicOrchestrator: conversation lifecycle, persistence and the
alarm bot end to end.
"""
import pytest

from topical.domain.errors import (
    ConversationAlreadyStartedError, ConversationNotStartedError, RegistryFrozenError,
    RootReturnedError, UnknownTopicTypeError
)
from topical.domain.context.instance_store import InstanceStore
from topical.domain.models.activity import TurnInput
from topical.domain.orchestration.orchestrator import TopicOrchestrator
from topical.domain.topic import Topic, TopicRegistry
from topical.infrastructure.config.settings import TopicalSettings
from topical.samples import alarm_bot

from conftest import Leaf

ALARMS = [{"name": "wake", "when": "7am"}, {"name": "gym", "when": "6pm"}]


class Exploding(Topic):

    async def on_dispatch(self) -> None:
        self.state["touched"] = True
        raise RuntimeError("boom")


class LeavesOrphan(Topic):
    """Creates an instance it never links to its children"""

    async def on_dispatch(self) -> None:
        self.context.create_instance(Leaf, self.id)


class TestConversationLifecycle:

    async def test_start_then_run(self, orchestrator, storage):
        root_id = await orchestrator.start_conversation("c", "Holder", {"child": "Leaf"})
        result = await orchestrator.run_turn("c", TurnInput.message("hello"))

        assert result.root_id == root_id
        assert result.started is False
        assert result.instance_count == 2
        assert await storage.read("topical/c") is not None

    async def test_run_before_start(self, orchestrator):
        with pytest.raises(ConversationNotStartedError):
            await orchestrator.run_turn("c", TurnInput.message("hello"))

    async def test_start_twice(self, orchestrator):
        await orchestrator.start_conversation("c", "Holder")
        with pytest.raises(ConversationAlreadyStartedError):
            await orchestrator.start_conversation("c", "Holder")

    async def test_do_turn_begins_once(self, orchestrator):
        first = await orchestrator.do_turn("c", TurnInput.message("hi"), "Holder", {"child": "Leaf"})
        second = await orchestrator.do_turn("c", TurnInput.message("hi"), "Holder", {"child": "Leaf"})

        assert first.started is True
        assert second.started is False
        assert first.root_id == second.root_id

    async def test_unknown_root_type(self, orchestrator, storage):
        with pytest.raises(UnknownTopicTypeError):
            await orchestrator.start_conversation("c", "Nope")
        assert await storage.read("topical/c") is None

    async def test_returning_root_is_not_saved(self, orchestrator, storage, metrics_collector):
        with pytest.raises(RootReturnedError):
            await orchestrator.start_conversation("c", "Immediate")

        assert await storage.read("topical/c") is None
        assert metrics_collector.get_metrics_summary()["turn.failed"] == 1

    async def test_registry_frozen_after_first_turn(self, orchestrator, registry):
        await orchestrator.start_conversation("c", "Holder")

        with pytest.raises(RegistryFrozenError):
            registry.register(Exploding)

    async def test_failed_turn_leaves_storage_untouched(self, storage, settings):
        registry = TopicRegistry()
        registry.register(Exploding)
        orchestrator = TopicOrchestrator(storage, registry=registry, settings=settings)
        await orchestrator.start_conversation("c", Exploding)
        before = await storage.read("topical/c")

        with pytest.raises(RuntimeError, match="boom"):
            await orchestrator.run_turn("c", TurnInput.message("hi"))

        assert await storage.read("topical/c") == before

    async def test_reset_conversation(self, orchestrator):
        await orchestrator.start_conversation("c", "Holder")

        assert await orchestrator.reset_conversation("c") is True
        assert (await orchestrator.get_table("c")).root_id is None
        assert await orchestrator.reset_conversation("c") is False

    async def test_storage_prefix_from_settings(self, storage, registry):
        orchestrator = TopicOrchestrator(storage, registry=registry, settings=TopicalSettings(storage_prefix="bots/"))
        await orchestrator.start_conversation("c", "Holder")

        assert await storage.read("bots/c") is not None

    async def test_turn_metrics(self, orchestrator, metrics_collector):
        await orchestrator.start_conversation("c", "Holder", {"child": "Leaf"})
        await orchestrator.run_turn("c", TurnInput.message("done"))

        summary = metrics_collector.get_metrics_summary()
        assert summary["latency.turn"]["count"] == 2
        assert summary["topic.created"] == 2
        assert summary["topic.returned"] == 1


class TestTelemetryAndOrphans:

    async def test_turn_event_sequence(self, orchestrator, recorder):
        root_id = await orchestrator.start_conversation("c", "Holder")

        assert recorder.types() == ["begin.start", "begin.end", "assign_root", "end_of_turn"]
        assert all(event.instance_id == root_id for event in recorder.events)

        recorder.clear()
        await orchestrator.run_turn("c", TurnInput.message("x"))
        assert recorder.types() == ["dispatch.start", "dispatch.end", "end_of_turn"]
        assert recorder.events[0].turn_input.text == "x"

    async def test_orphans_are_collected(self, storage, registry, settings):
        registry.register(LeavesOrphan)
        orchestrator = TopicOrchestrator(storage, registry=registry, settings=settings)
        await orchestrator.start_conversation("c", LeavesOrphan)

        result = await orchestrator.run_turn("c", TurnInput.message("x"))

        assert result.orphans_collected == 1
        assert len((await orchestrator.get_table("c")).instances) == 1

    async def test_orphans_kept_when_collection_disabled(self, storage, registry):
        registry.register(LeavesOrphan)
        orchestrator = TopicOrchestrator(
            storage, registry=registry, settings=TopicalSettings(collect_orphans=False)
        )
        await orchestrator.start_conversation("c", LeavesOrphan)

        result = await orchestrator.run_turn("c", TurnInput.message("x"))

        assert result.orphans_collected == 1
        assert len((await orchestrator.get_table("c")).instances) == 2


class TestAlarmBot:

    @pytest.fixture
    def bot(self, storage, settings, recorder):
        registry = alarm_bot.register(TopicRegistry())
        return TopicOrchestrator(storage, registry=registry, settings=settings, telemetry_sink=recorder)

    async def say(self, bot, channel, *texts):
        for text in texts:
            await bot.run_turn("alarms", TurnInput.message(text), channel)

    async def test_delete_flow(self, bot, channel, storage):
        root_id = await bot.start_conversation("alarms", alarm_bot.AlarmBot, {"alarms": ALARMS}, channel=channel)
        await self.say(bot, channel, "delete an alarm")

        table = await bot.get_table("alarms")
        delete_id = table.instances[root_id].child_ids[0]
        assert table.instances[delete_id].type_name == "DeleteAlarm"
        assert table.instances[delete_id].state["alarms"] == ALARMS

        await self.say(bot, channel, "gym", "yes")

        table = await bot.get_table("alarms")
        root = table.instances[root_id]
        assert channel.texts[-1] == 'Alarm "gym" has been deleted.'
        assert root.state["alarms"] == [{"name": "wake", "when": "7am"}]
        assert root.child_ids == []
        assert list(table.instances) == [root_id]

        await self.say(bot, channel, "show")
        assert channel.texts.count("Welcome to Alarm Bot!\nI know how to set, show, and delete alarms.") == 1
        assert channel.texts[-1] == 'You have the following alarms set:\n* "wake" set for 7am'
        assert (await bot.get_table("alarms")).root_id == root_id

    async def test_declined_delete(self, bot, channel):
        await bot.start_conversation("alarms", alarm_bot.AlarmBot, {"alarms": ALARMS}, channel=channel)
        await self.say(bot, channel, "remove", "wake", "no")

        table = await bot.get_table("alarms")
        assert channel.texts[-1] == "Okay, the status quo has been preserved."
        assert table.instances[table.root_id].state["alarms"] == ALARMS

    async def test_set_and_show(self, bot, channel):
        await bot.start_conversation("alarms", alarm_bot.AlarmBot, channel=channel)
        await self.say(bot, channel, "show", "set an alarm", "nap", "3pm", "list")

        assert channel.texts[1:] == [
            "You haven't set any alarms.",
            "What do you want to call it?",
            "For when do you want to set it?",
            "Alarm successfully added!",
            'You have the following alarms set:\n* "nap" set for 3pm',
        ]

    async def test_delete_with_no_alarms(self, bot, channel):
        await bot.start_conversation("alarms", alarm_bot.AlarmBot, channel=channel)
        await self.say(bot, channel, "delete")

        assert channel.texts[-2:] == ["You don't have any alarms.", "Okay, the status quo has been preserved."]
        assert len((await bot.get_table("alarms")).instances) == 1

    async def test_persist_reload_between_turns(self, bot, channel, storage):
        await bot.start_conversation("alarms", alarm_bot.AlarmBot, {"alarms": ALARMS}, channel=channel)
        await self.say(bot, channel, "delete")

        store = InstanceStore(storage, "alarms")
        before = await store.load()
        await store.save()
        after = await InstanceStore(storage, "alarms").load()

        assert after == before
        assert len(after.instances) == 3
