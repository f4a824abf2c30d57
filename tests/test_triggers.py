"""
Tests for best-match trigger selection.
"""
from typing import Any, Optional
import pytest

from topical.domain.models.activity import TurnInput
from topical.domain.orchestration.orchestrator import TopicOrchestrator
from topical.domain.topic import Topic, TopicRegistry, TriggerResult, select_trigger
from topical.samples import travel


class Scored(Topic):
    """Offers a fixed score; None means it never offers"""

    def __init__(self, label: str, score: Optional[float] = None):
        super().__init__()
        self.label = label
        self.score = score

    async def get_trigger_score(self, turn_input: TurnInput) -> Optional[TriggerResult]:
        if self.score is None:
            return None
        return TriggerResult(score=self.score, begin_args={"picked": self.label})

    async def on_begin(self, args: Any = None) -> None:
        self.state["begun_with"] = args


@pytest.fixture
def scored_registry(registry):
    registry.register(Scored)
    return registry


async def root_with_candidates(make_context, scores):
    context = make_context("anything")
    root = context.create_instance("Holder")
    context.store.root_id = root.id
    await context.begin(root.id)
    holder = context.topic_for(root.id)

    ids = {}
    for label, score in scores.items():
        ids[label] = await holder.create_child(Scored, {"label": label, "score": score})
    return context, holder, ids


class TestSelectTrigger:

    async def test_highest_score_wins(self, scored_registry, make_context):
        context, holder, ids = await root_with_candidates(make_context, {"A": 0, "B": 0.5, "C": 0.6})

        match = await select_trigger(holder, holder.children.idle())

        assert match.instance_id == ids["C"]
        assert match.result.score == 0.6

    async def test_all_zero_is_no_match(self, scored_registry, make_context):
        context, holder, ids = await root_with_candidates(make_context, {"A": 0, "B": 0, "C": None})

        assert await select_trigger(holder, holder.children.idle()) is None
        assert await holder.try_triggers() is False
        assert all(not context.store.get(child_id).started for child_id in ids.values())

    async def test_tie_goes_to_first_candidate(self, scored_registry, make_context):
        context, holder, ids = await root_with_candidates(make_context, {"A": 0.7, "B": 0.7})

        match = await select_trigger(holder, holder.children.idle())
        assert match.instance_id == ids["A"]

    async def test_winner_begins_with_its_args(self, scored_registry, make_context):
        context, holder, ids = await root_with_candidates(make_context, {"A": 0.2, "B": 0.9})

        assert await holder.try_triggers() is True

        winner = context.store.get(ids["B"])
        assert winner.started
        assert winner.state["begun_with"] == {"picked": "B"}
        assert holder.children.idle() == [ids["A"]]
        assert holder.children.active() == [ids["B"]]


class TestTravelSample:

    @pytest.fixture
    def travel_orchestrator(self, storage, settings):
        registry = travel.register(TopicRegistry())
        return TopicOrchestrator(storage, registry=registry, settings=settings)

    async def test_triggers_pick_and_restart(self, travel_orchestrator, channel):
        await travel_orchestrator.start_conversation("trip", travel.Travel, channel=channel)
        for text in ("pizza", "book me a hotel", "anything", "restart", "a flight please"):
            await travel_orchestrator.run_turn("trip", TurnInput.message(text), channel)

        assert channel.texts == [
            "I can book flights and hotels.",
            "I can't do that.",
            "Let's stay at a Hyatt!",
            'I don\'t really do much. Try "restart".',
            "Let's fly to Paris!",
        ]

        table = await travel_orchestrator.get_table("trip")
        root = table.instances[table.root_id]
        assert sorted(table.instances[child_id].type_name for child_id in root.child_ids) == ["Flights", "Hotels"]

    async def test_hotel_outscores_flight(self, travel_orchestrator, channel):
        await travel_orchestrator.start_conversation("trip", travel.Travel, channel=channel)
        await travel_orchestrator.run_turn("trip", TurnInput.message("flight and hotel"), channel)

        assert channel.texts[-1] == "Let's stay at a Hyatt!"
