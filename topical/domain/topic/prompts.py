from typing import List, Optional, Sequence

from topical.domain.models.activity import OutgoingMessage
from topical.domain.validation.validator import Validator, ValidatorResult
from topical.domain.validation.validators import (
    DEFAULT_CULTURE, has_choice, has_confirmation, has_number_for, has_text, in_range
)
from .prompt import Prompt


class TextPrompt(Prompt):
    """Ask for any non-empty text"""

    topic_name = "TextPrompt"
    validator = has_text


class NumberPrompt(Prompt):
    """Ask for a number in the given culture, optionally bounded by minimum/maximum"""

    topic_name = "NumberPrompt"

    def __init__(
        self,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        max_turns: Optional[int] = None,
        culture: str = DEFAULT_CULTURE
    ):
        validator: Validator = has_number_for(culture)
        if minimum is not None or maximum is not None:
            validator = validator.where(in_range(minimum, maximum), "out_of_range")
        super().__init__(max_turns, validator)
        self.culture = culture


class ChoicePrompt(Prompt):
    """Ask the user to pick one of a fixed list; returns a FoundChoice"""

    topic_name = "ChoicePrompt"

    def __init__(self, choices: Sequence[str], max_turns: Optional[int] = None):
        self.choices: List[str] = list(choices)
        super().__init__(max_turns, has_choice(self.choices))

    async def prompt(self, result: Optional[ValidatorResult] = None) -> None:
        text = self.prompt_text(result)
        if not text:
            return
        await self.send(OutgoingMessage(text=text, suggested_actions=self.choices))


class ConfirmPrompt(Prompt):
    """Ask a yes/no question; the value is a bool"""

    topic_name = "ConfirmPrompt"
    validator = has_confirmation

    async def prompt(self, result: Optional[ValidatorResult] = None) -> None:
        text = self.prompt_text(result)
        if not text:
            return
        await self.send(OutgoingMessage(text=text, suggested_actions=["yes", "no"]))
