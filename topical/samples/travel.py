"""
Trigger demo: Travel keeps idle Flights and Hotels children and begins
whichever one scores best against the user's text.

    python -m topical.samples.travel
"""

from typing import Any, Optional
import asyncio

from topical.domain.models.activity import TurnInput
from topical.domain.models.topic_instance import TopicInstance
from topical.domain.topic import Topic, TopicRegistry, TriggerResult, topic_registry


class Flights(Topic):

    async def get_trigger_score(self, turn_input: TurnInput) -> Optional[TriggerResult]:
        if turn_input.text and "flight" in turn_input.text.lower():
            return TriggerResult(score=0.5, begin_args={"destination": "Paris"})
        return None

    async def on_begin(self, args: Any = None) -> None:
        await self.send(f"Let's fly to {args['destination'] if args else 'a city'}!")

    async def on_dispatch(self) -> None:
        if self.text == "restart":
            self.return_to_parent()
            return
        await self.send('I don\'t really do much. Try "restart".')


class Hotels(Topic):

    async def get_trigger_score(self, turn_input: TurnInput) -> Optional[TriggerResult]:
        if turn_input.text and "hotel" in turn_input.text.lower():
            return TriggerResult(score=0.6, begin_args={"chain": "Hyatt"})
        return None

    async def on_begin(self, args: Any = None) -> None:
        await self.send(f"Let's stay at a {args['chain'] if args else 'hotel'}!")

    async def on_dispatch(self) -> None:
        if self.text == "restart":
            self.return_to_parent()
            return
        await self.send('I don\'t really do much. Try "restart".')


class Travel(Topic):
    """Root topic offering its idle children to the trigger selector"""

    subtopics = (Flights, Hotels)

    async def on_begin(self, args: Any = None) -> None:
        await self.send("I can book flights and hotels.")
        for topic_type in self.subtopics:
            await self.create_child(topic_type)

    async def on_dispatch(self) -> None:
        active = self.children.active()
        if active:
            await self.children.dispatch(active[0])
            return

        if not await self.try_triggers():
            await self.send("I can't do that.")

    async def on_child_return(self, child: TopicInstance) -> None:
        # a finished child is replaced with a fresh idle one
        await self.create_child(child.type_name)


TOPICS = (Travel, Flights, Hotels)


def register(registry: TopicRegistry = topic_registry) -> TopicRegistry:
    registry.register_all(*TOPICS)
    return registry


def main():
    from topical.samples import run_sample
    asyncio.run(run_sample(Travel, register))


if __name__ == "__main__":
    main()
