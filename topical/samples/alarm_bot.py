"""
Alarm bot: set, show and delete alarms.

    python -m topical.samples.alarm_bot
"""

from typing import Dict, Any, List
import asyncio
import re

from topical.domain.models.topic_instance import TopicInstance
from topical.domain.topic import (
    ConfirmPrompt, SimpleForm, TextPrompt, Topic, TopicRegistry,
    register_builtin_topics, topic_registry
)
from topical.domain.topic.prompt import PromptReturn

HELP_TEXT = "I know how to set, show, and delete alarms."

ALARM_FORM_SCHEMA = {
    "name": {"type": "string", "prompt": "What do you want to call it?"},
    "when": {"type": "string", "prompt": "For when do you want to set it?"},
}


def list_alarms(alarms: List[Dict[str, Any]]) -> str:
    return "\n".join(f'* "{alarm["name"]}" set for {alarm["when"]}' for alarm in alarms)


class ShowAlarms(Topic):
    """Lists the alarms and returns at once"""

    async def on_begin(self, args: Any = None) -> None:
        alarms = (args or {}).get("alarms", [])
        if not alarms:
            await self.send("You haven't set any alarms.")
        else:
            await self.send(f"You have the following alarms set:\n{list_alarms(alarms)}")
        self.return_to_parent()


class DeleteAlarm(Topic):
    """Asks which alarm to delete, then for confirmation

    Returns {"alarm_name": ...} when confirmed, None otherwise.
    """

    async def on_begin(self, args: Any = None) -> None:
        alarms = (args or {}).get("alarms", [])
        if not alarms:
            await self.send("You don't have any alarms.")
            self.return_to_parent()
            return

        self.state["alarms"] = alarms
        await self.begin_child(
            TextPrompt,
            {"name": "which_alarm", "prompt": f"Which alarm do you want to delete?\n{list_alarms(alarms)}"},
            {"max_turns": 100}
        )

    async def on_dispatch(self) -> None:
        await self.child.dispatch()

    async def on_child_return(self, child: TopicInstance) -> None:
        result: PromptReturn = child.return_args

        if result.name == "which_alarm":
            self.state["alarm_name"] = result.result.value
            await self.begin_child(
                ConfirmPrompt,
                {"name": "confirm", "prompt": f'Are you sure you want to delete alarm "{result.result.value}"? (yes/no)'}
            )
        elif result.name == "confirm":
            self.child.clear()
            self.return_to_parent({"alarm_name": self.state["alarm_name"]} if result.result.value is True else None)
        else:
            raise ValueError(f"Unknown prompt name {result.name!r}")


class AlarmBot(Topic):
    """Root topic; routes commands to a single child"""

    async def on_begin(self, args: Any = None) -> None:
        self.state["alarms"] = list((args or {}).get("alarms", []))
        await self.send(f"Welcome to Alarm Bot!\n{HELP_TEXT}")

    async def on_dispatch(self) -> None:
        if self.child.has():
            await self.child.dispatch()
            return

        text = self.text
        if text is None:
            return

        if re.search(r"set|add|create", text, re.IGNORECASE):
            await self.begin_child(SimpleForm, None, {"schema": ALARM_FORM_SCHEMA})
        elif re.search(r"show|list", text, re.IGNORECASE):
            await self.begin_child(ShowAlarms, {"alarms": self.state["alarms"]})
        elif re.search(r"delete|remove", text, re.IGNORECASE):
            await self.begin_child(DeleteAlarm, {"alarms": self.state["alarms"]})
        else:
            await self.send(HELP_TEXT)

    async def on_child_return(self, child: TopicInstance) -> None:
        if child.type_name == "SimpleForm":
            self.state["alarms"].append(dict(child.return_args["form"]))
            await self.send("Alarm successfully added!")
        elif child.type_name == "DeleteAlarm":
            if child.return_args:
                alarm_name = child.return_args["alarm_name"]
                self.state["alarms"] = [alarm for alarm in self.state["alarms"] if alarm["name"] != alarm_name]
                await self.send(f'Alarm "{alarm_name}" has been deleted.')
            else:
                await self.send("Okay, the status quo has been preserved.")
        elif child.type_name != "ShowAlarms":
            raise ValueError(f"Unexpected child topic {child.type_name}")
        self.child.clear()


TOPICS = (AlarmBot, ShowAlarms, DeleteAlarm)


def register(registry: TopicRegistry = topic_registry) -> TopicRegistry:
    register_builtin_topics(registry)
    registry.register_all(*TOPICS)
    return registry


def main():
    from topical.samples import run_sample
    asyncio.run(run_sample(AlarmBot, register))


if __name__ == "__main__":
    main()
