"""
Waterfall: run an ordered list of steps against one topic's state.

    class Age(Waterfall):
        def steps(self):
            return [self.ask_name, self.ask_age, self.reply]

        async def ask_name(self, value):
            await self.begin_child(TextPrompt, {"name": "name", "prompt": "What's your name?"})

        async def ask_age(self, name):
            if name == "Bill Barnes":
                return 51                       # skip the prompt, go on with 51
            await self.begin_child(AgePrompt, {"name": "age"})

        async def reply(self, age):
            await self.send(f"You're {age}.")

A step's return value is the next step's input. A step that begins a child
suspends the waterfall; the child's result is the next step's input once it
returns. While that step runs, self.child_return holds the returned child, so
a step can tell an exhausted prompt (child_result.reason == "too_many_attempts")
from an answer. When the steps run out the waterfall returns the last output
to its parent. step_index lives in state and only ever moves forward.
"""

from typing import Any, Awaitable, Callable, List, Optional

from topical.domain.models.topic_instance import TopicInstance
from topical.domain.validation.validator import ValidatorResult
from .prompt import PromptReturn
from .topic import Topic

Step = Callable[[Any], Awaitable[Any]]


class Waterfall(Topic):
    """Topic that runs statically declared steps in order"""

    def __init__(self):
        super().__init__()
        self._child_returned = False
        self._child_value: Any = None
        self._returned_child: Optional[TopicInstance] = None
        self.child_return: Optional[TopicInstance] = None
        self._waiting = False
        self._finished = False
        self._finish_args: Any = None

    def steps(self) -> List[Step]:
        return []

    @property
    def step_index(self) -> int:
        return self.state.get("step_index", 0)

    def wait(self) -> None:
        """Suspend after the current step until the next turn"""
        self._waiting = True

    def finish(self, args: Any = None) -> None:
        """Stop after the current step and return args to the parent"""
        self._finished = True
        self._finish_args = args

    def child_value(self, child: TopicInstance) -> Any:
        """Value a returning child contributes as the next step's input"""

        if isinstance(child.return_args, PromptReturn):
            return child.return_args.result.value
        return child.return_args

    @property
    def child_result(self) -> Optional[ValidatorResult]:
        """Validation result of the prompt whose return feeds the running step"""

        if self.child_return is not None and isinstance(self.child_return.return_args, PromptReturn):
            return self.child_return.return_args.result
        return None

    def _take_child_value(self) -> Any:
        value = self._child_value
        self.child_return = self._returned_child
        self._child_returned = False
        self._child_value = None
        self._returned_child = None
        return value

    async def run_waterfall(self, value: Any = None) -> bool:
        """Run steps from step_index; return True once every step has run"""

        steps = self.steps()
        self.state.setdefault("step_index", 0)

        if self.child.has():
            await self.child.dispatch()
            if not self._child_returned:
                return False
            value = self._take_child_value()

        while self.state["step_index"] < len(steps) and not self._finished:
            step = steps[self.state["step_index"]]
            self.state["step_index"] += 1
            self._waiting = False

            output = await step(value)
            self.child_return = None

            if self._child_returned:
                # the child began and returned within the step
                value = self._take_child_value()
                continue

            if self.child.has() or self._waiting:
                return False

            value = output

        self.state["last_output"] = value
        return True

    async def _advance(self, value: Any = None) -> None:
        if await self.run_waterfall(value) and not self.returned:
            self.return_to_parent(self._finish_args if self._finished else self.state.get("last_output"))

    async def on_begin(self, args: Any = None) -> None:
        await self._advance(args)

    async def on_dispatch(self) -> None:
        await self._advance()

    async def on_child_return(self, child: TopicInstance) -> None:
        self._child_returned = True
        self._child_value = self.child_value(child)
        self._returned_child = child
        self.child.clear()
