"""
Waterfall demo: ask for a name, then an age, unless we already know it.

    python -m topical.samples.age_waterfall
"""

from typing import Any, Optional
import asyncio

from topical.domain.models.topic_instance import TopicInstance
from topical.domain.topic import TOO_MANY_ATTEMPTS, Prompt, Topic, TopicRegistry, Waterfall, topic_registry
from topical.domain.validation.validator import ValidatorResult
from topical.domain.validation.validators import has_number

KNOWN_AGES = {"Bill Barnes": 51}


class PromptForAge(Prompt):

    validator = has_number.where(lambda turn_input, age: 0 < age < 150, "invalid_age")

    async def prompt(self, result: Optional[ValidatorResult] = None) -> None:
        await self.send("Please provide a valid age." if result else "How old are you?")


class Age(Waterfall):

    def steps(self):
        return [self.ask_name, self.ask_age, self.reply]

    async def ask_name(self, value: Any):
        await self.send("What's your name?")
        self.wait()

    async def ask_age(self, value: Any):
        self.state["name"] = self.text
        if self.text in KNOWN_AGES:
            return KNOWN_AGES[self.text]
        await self.begin_child(PromptForAge)

    async def reply(self, age: Any):
        if self.child_result is not None and self.child_result.reason == TOO_MANY_ATTEMPTS:
            await self.send("Too many tries. Let's start over.")
            return None
        await self.send(f"You're {age}? That's so old!" if age > 30 else "Phew, you've still got a few good years left")
        return {"name": self.state["name"], "age": age}


class Root(Topic):

    async def on_begin(self, args: Any = None) -> None:
        await self.begin_child(Age)

    async def on_child_return(self, child: TopicInstance) -> None:
        self.child.clear()
        await self.begin_child(Age)


TOPICS = (Root, Age, PromptForAge)


def register(registry: TopicRegistry = topic_registry) -> TopicRegistry:
    registry.register_all(*TOPICS)
    return registry


def main():
    from topical.samples import run_sample
    asyncio.run(run_sample(Root, register))


if __name__ == "__main__":
    main()
