"""
Topic: one node of the dialog tree.

A Topic subclass supplies behavior; the persisted TopicInstance supplies
identity and state. The orchestrator rebuilds the behavior object from the
record on each turn (constructor_args are passed back to __init__), binds it
to the turn, calls one lifecycle hook and throws it away at end of turn.

Lifecycle hooks:
    on_begin(args)           first call, right after creation
    on_dispatch()            one turn of input while the topic is active
    on_child_return(child)   a child finished; child.return_args holds its result
    get_trigger_score(input) offer to begin in response to input (idle candidates)

A topic finishes by calling return_to_parent(args), at most once.
"""

from typing import Dict, Any, List, Optional, TYPE_CHECKING

from topical.domain.errors import AlreadyReturnedError
from topical.domain.models.activity import Output, TurnInput
from topical.domain.models.topic_instance import ReturnStatus, TopicInstance
from .children import ChildArray, ChildSlot
from .triggers import TriggerResult, try_triggers

if TYPE_CHECKING:
    from topical.domain.orchestration.turn_context import TurnContext
    from .registry import TopicType


class Topic:
    """Base class for all topics"""

    topic_name: Optional[str] = None

    def __init__(self):
        self.context: Optional["TurnContext"] = None
        self.instance: Optional[TopicInstance] = None
        self.child = ChildSlot(self)
        self.children = ChildArray(self)

    def bind(self, context: "TurnContext", instance: TopicInstance) -> "Topic":
        """Attach the behavior object to this turn and its persisted record"""
        self.context = context
        self.instance = instance
        return self

    @property
    def id(self) -> str:
        return self.instance.id

    @property
    def state(self) -> Dict[str, Any]:
        return self.instance.state

    @state.setter
    def state(self, value: Dict[str, Any]):
        self.instance.state = value

    @property
    def input(self) -> TurnInput:
        return self.context.turn_input

    @property
    def text(self) -> Optional[str]:
        turn_input = self.context.turn_input
        return turn_input.text if turn_input is not None and turn_input.is_message else None

    @property
    def returned(self) -> bool:
        return self.instance.has_returned

    async def send(self, output: Output) -> None:
        """Send a reply through the turn's channel"""
        await self.context.send(output)

    def return_to_parent(self, args: Any = None) -> None:
        """Signal completion; the orchestrator hands args to the parent"""

        if self.instance.has_returned:
            raise AlreadyReturnedError(self.instance.id)

        self.instance.return_status = ReturnStatus.SIGNALLED
        self.instance.return_args = args

    def list_children(self) -> List[str]:
        return list(self.instance.child_ids)

    async def begin_child(
        self,
        topic_type: "TopicType",
        begin_args: Any = None,
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> Optional[str]:
        """Begin a topic as this topic's only child; None if it returned at once"""
        return await self.child.begin(topic_type, begin_args, constructor_args)

    async def create_child(
        self,
        topic_type: "TopicType",
        constructor_args: Optional[Dict[str, Any]] = None
    ) -> str:
        """Create an idle child that can later be begun, e.g. by a trigger"""
        return await self.children.create(topic_type, constructor_args)

    async def try_triggers(self, candidate_ids: Optional[List[str]] = None) -> bool:
        return await try_triggers(self, candidate_ids)

    async def on_begin(self, args: Any = None) -> None:
        pass

    async def on_dispatch(self) -> None:
        active = self.children.active()
        if len(active) == 1:
            await self.context.dispatch(active[0])

    async def on_child_return(self, child: TopicInstance) -> None:
        self.children.clear()

    async def get_trigger_score(self, turn_input: TurnInput) -> Optional[TriggerResult]:
        return None
