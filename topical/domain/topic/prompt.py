from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
from enum import Enum

from topical.domain.validation.validator import Validator, ValidatorResult
from topical.infrastructure.config.settings import get_settings
from .topic import Topic

TOO_MANY_ATTEMPTS = "too_many_attempts"


class PromptStatus(str, Enum):
    """Where a prompt is in its question/answer cycle"""
    AWAITING_INPUT = "awaiting_input"
    RETRYING = "retrying"
    RESOLVED = "resolved"
    EXHAUSTED = "exhausted"


class PromptReturn(BaseModel):
    """What a prompt hands back to its parent"""
    name: Optional[str] = Field(None, description="Name the parent gave this prompt")
    result: ValidatorResult
    attempts: int = 0


class Prompt(Topic):
    """Ask a question, validate each answer, retry up to max_turns times

    Begin args: {"name": ..., "prompt": ..., "reprompt": ...}; anything else
    is kept under state["args"] for custom prompters.
    """

    validator: Optional[Validator] = None
    max_turns: Optional[int] = None

    def __init__(self, max_turns: Optional[int] = None, validator: Optional[Validator] = None):
        super().__init__()
        if validator is not None:
            self.validator = validator
        if self.validator is None:
            raise TypeError(f"{type(self).__name__} has no validator")
        if max_turns is not None:
            self.max_turns = max_turns

    def get_max_turns(self) -> int:
        if self.max_turns is not None:
            return self.max_turns
        if self.context is not None:
            return self.context.settings.prompt_max_turns
        return get_settings().prompt_max_turns

    @property
    def status(self) -> PromptStatus:
        return PromptStatus(self.state.get("status", PromptStatus.AWAITING_INPUT.value))

    def prompt_text(self, result: Optional[ValidatorResult] = None) -> Optional[str]:
        """The question, or the reprompt when re-asking after a failure"""

        args: Dict[str, Any] = self.state.get("args", {})
        if result is not None and args.get("reprompt"):
            return args["reprompt"]
        return args.get("prompt")

    async def prompt(self, result: Optional[ValidatorResult] = None) -> None:
        """Send the question; result is the failed validation when re-asking"""

        text = self.prompt_text(result)
        if text:
            await self.send(text)

    async def on_begin(self, args: Any = None) -> None:
        args = dict(args or {})
        self.state.update(
            name=args.get("name"),
            turns=0,
            status=PromptStatus.AWAITING_INPUT.value,
            args=args
        )
        await self.prompt()

    async def on_dispatch(self) -> None:
        result = await self.validator.validate(self.input)
        self.state["turns"] += 1

        if result.ok:
            self.state["status"] = PromptStatus.RESOLVED.value
            self.return_to_parent(PromptReturn(
                name=self.state["name"],
                result=result,
                attempts=self.state["turns"]
            ))
            return

        if self.state["turns"] >= self.get_max_turns():
            self.state["status"] = PromptStatus.EXHAUSTED.value
            self.return_to_parent(PromptReturn(
                name=self.state["name"],
                result=ValidatorResult(value=result.value, reason=TOO_MANY_ATTEMPTS),
                attempts=self.state["turns"]
            ))
            return

        self.state["status"] = PromptStatus.RETRYING.value
        self.state["last_reason"] = result.reason
        await self.prompt(result)
