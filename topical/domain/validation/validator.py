"""
Validator chain

A Validator wraps a recognition function that turns a TurnInput into either
a value or a short machine-readable failure reason. Validators compose with
and_() (the constraint produces the next value) and where() (a predicate that
keeps the current value). The first failing stage short-circuits the rest and
its reason reaches the caller unmodified.

Usage:
    is_adult = has_number.where(lambda turn_input, age: age >= 18, "too_young")
    result = await is_adult.validate(turn_input)
    if result.ok:
        ...
"""

from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union
from pydantic import BaseModel
import inspect

from topical.domain.models.activity import TurnInput

V = TypeVar("V")
W = TypeVar("W")

NONE_REASON = "none"
FAILED_CONSTRAINT_REASON = "failed_constraint"


class ValidatorResult(BaseModel):
    """Outcome of a recognition stage"""
    value: Optional[Any] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.reason is None


def succeed(value: Any) -> ValidatorResult:
    return ValidatorResult(value=value)


def fail(reason: str) -> ValidatorResult:
    return ValidatorResult(reason=reason)


Recognized = Union[ValidatorResult, Any]
Recognize = Callable[[TurnInput], Union[Recognized, Awaitable[Recognized]]]
Constraint = Callable[[TurnInput, Any], Union[Recognized, Awaitable[Recognized]]]
Predicate = Callable[[TurnInput, Any], Union[bool, Awaitable[bool]]]


async def _resolve(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _normalize(result: Any) -> ValidatorResult:
    if result is None:
        return ValidatorResult(reason=NONE_REASON)
    if isinstance(result, ValidatorResult):
        if result.reason is None and result.value is None:
            return ValidatorResult(reason=NONE_REASON)
        return result
    return ValidatorResult(value=result)


class Validator(Generic[V]):
    """Composable input recognizer"""

    def __init__(self, recognize: Recognize):
        self._recognize = recognize

    async def validate(self, turn_input: TurnInput) -> ValidatorResult:
        """Run the recognizer and always return a structured result"""
        return _normalize(await _resolve(self._recognize(turn_input)))

    def and_(self, constraint: Constraint) -> "Validator[W]":
        """Chain a stage that consumes the current value and produces the next one"""

        async def recognize(turn_input: TurnInput) -> ValidatorResult:
            result = await self.validate(turn_input)
            if not result.ok:
                return ValidatorResult(reason=result.reason)
            return _normalize(await _resolve(constraint(turn_input, result.value)))

        return Validator(recognize)

    def where(self, predicate: Predicate, reason: str = FAILED_CONSTRAINT_REASON) -> "Validator[V]":
        """Chain a boolean check that keeps the current value"""

        async def constraint(turn_input: TurnInput, value: Any) -> ValidatorResult:
            if await _resolve(predicate(turn_input, value)):
                return ValidatorResult(value=value)
            return ValidatorResult(reason=reason)

        return self.and_(constraint)
