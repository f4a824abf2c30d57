from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from topical.domain.models.topic_instance import TopicInstance
from .prompt import PromptReturn
from .prompts import TextPrompt
from .topic import Topic


class FormField(BaseModel):
    """One field of a SimpleForm schema"""
    type: str = Field(default="string", description="Only string fields are collected")
    prompt: str


class SimpleForm(Topic):
    """Collect each schema field with a TextPrompt, then return {"form": {...}}

    Constructor args: {"schema": {field: {"type": "string", "prompt": str}}}.
    Begin args may prefill fields: {"form": {field: value}}.
    """

    topic_name = "SimpleForm"

    def __init__(self, schema: Dict[str, Dict[str, Any]]):
        super().__init__()
        self.schema: Dict[str, FormField] = {
            name: FormField.model_validate(field) for name, field in schema.items()
        }

    @property
    def form(self) -> Dict[str, Any]:
        return self.state.setdefault("form", {})

    def next_field(self) -> Optional[str]:
        for name in self.schema:
            if name not in self.form:
                return name
        return None

    async def _ask_next(self) -> None:
        while not self.child.has() and not self.returned:
            name = self.next_field()
            if name is None:
                self.return_to_parent({"form": dict(self.form)})
                return
            await self.begin_child(TextPrompt, {"name": name, "prompt": self.schema[name].prompt})

    async def on_begin(self, args: Any = None) -> None:
        prefilled = (args or {}).get("form") or {}
        self.state["form"] = {name: value for name, value in prefilled.items() if name in self.schema}
        await self._ask_next()

    async def on_dispatch(self) -> None:
        await self.child.dispatch()
        await self._ask_next()

    async def on_child_return(self, child: TopicInstance) -> None:
        result = child.return_args
        name = result.name if isinstance(result, PromptReturn) and result.name else self.next_field()
        # an exhausted prompt leaves the field empty rather than asking forever
        self.form[name] = result.result.value if isinstance(result, PromptReturn) and result.result.ok else None
        self.child.clear()
