from typing import Any, List, Optional, Sequence
from pydantic import BaseModel
from rapidfuzz import process, fuzz
from recognizers_number import recognize_number
from recognizers_text import Culture

from topical.domain.models.activity import TurnInput
from .validator import Validator, ValidatorResult, fail

DEFAULT_CULTURE = Culture.English

YES_WORDS = {"yes", "y", "yeah", "yep", "sure", "ok", "okay", "true"}
NO_WORDS = {"no", "n", "nope", "nah", "false"}


def _recognize_message(turn_input: TurnInput) -> ValidatorResult:
    if turn_input.is_message:
        return ValidatorResult(value=turn_input)
    return fail("not_a_message")


def _recognize_text(turn_input: TurnInput, message: TurnInput) -> ValidatorResult:
    text = (message.text or "").strip()
    if text:
        return ValidatorResult(value=text)
    return fail("empty_text")


def _resolution_value(text: str, start: int, resolved: str) -> float:
    # cultures with a decimal comma resolve "4,5" rather than "4.5"
    if "," in resolved and "." not in resolved:
        resolved = resolved.replace(",", ".")
    number = float(resolved)
    # a bare minus sign in front of the digits is left outside some matches
    if number > 0 and start > 0 and text[start - 1] == "-" and (start == 1 or text[start - 2].isspace()):
        number = -number
    return number


def parse_numbers(text: str, culture: str = DEFAULT_CULTURE) -> List[float]:
    """Numbers written as digits or words in the given culture, in order of appearance"""

    numbers = []
    for model_result in recognize_number(text, culture):
        resolution = model_result.resolution or {}
        if resolution.get("value") is None:
            continue
        numbers.append(_resolution_value(text, model_result.start, str(resolution["value"])))
    return numbers


def has_numbers_for(culture: str = DEFAULT_CULTURE) -> Validator[List[float]]:
    """Validator for every number in the text, recognized in the given culture"""

    def recognize_numbers(turn_input: TurnInput, text: str) -> ValidatorResult:
        numbers = parse_numbers(text, culture)
        if numbers:
            return ValidatorResult(value=numbers)
        return fail("not_a_number")

    return has_text.and_(recognize_numbers)


def _first_number(turn_input: TurnInput, numbers: List[float]) -> float:
    number = numbers[0]
    return int(number) if number.is_integer() else number


def has_number_for(culture: str = DEFAULT_CULTURE) -> Validator[float]:
    """Validator for the first number in the text, recognized in the given culture"""
    return has_numbers_for(culture).and_(_first_number)


is_message: Validator[TurnInput] = Validator(_recognize_message)

has_text: Validator[str] = is_message.and_(_recognize_text)

has_numbers: Validator[List[float]] = has_numbers_for(DEFAULT_CULTURE)

has_number: Validator[float] = has_number_for(DEFAULT_CULTURE)


class FoundChoice(BaseModel):
    """Choice matched by has_choice"""
    value: str
    index: int
    score: float


def has_choice(choices: Sequence[str], score_cutoff: float = 80.0) -> Validator[FoundChoice]:
    """Match the turn text against a list of choices, tolerating typos"""

    def recognize_choice(turn_input: TurnInput, text: str) -> ValidatorResult:
        lowered = [choice.lower() for choice in choices]
        if text.isascii() and text.isdigit() and 1 <= int(text) <= len(choices):
            index = int(text) - 1
            return ValidatorResult(value=FoundChoice(value=choices[index], index=index, score=100.0))

        match = process.extractOne(text.lower(), lowered, scorer=fuzz.WRatio, score_cutoff=score_cutoff)
        if match is None:
            return fail("not_a_choice")
        _, score, index = match
        return ValidatorResult(value=FoundChoice(value=choices[index], index=index, score=score))

    return has_text.and_(recognize_choice)


def _recognize_confirmation(turn_input: TurnInput, text: str) -> Optional[ValidatorResult]:
    word = text.lower().strip(" .!")
    if word in YES_WORDS:
        return ValidatorResult(value=True)
    if word in NO_WORDS:
        return ValidatorResult(value=False)
    return fail("not_a_confirmation")


has_confirmation: Validator[bool] = has_text.and_(_recognize_confirmation)


def in_range(minimum: Optional[float] = None, maximum: Optional[float] = None):
    """Predicate for Validator.where bounding a numeric value"""

    def check(turn_input: TurnInput, value: Any) -> bool:
        if minimum is not None and value < minimum:
            return False
        if maximum is not None and value > maximum:
            return False
        return True

    return check
