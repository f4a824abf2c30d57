from .validator import Validator, ValidatorResult, succeed, fail, NONE_REASON, FAILED_CONSTRAINT_REASON
from .validators import (
    is_message, has_text, has_numbers, has_number, has_numbers_for, has_number_for,
    has_choice, has_confirmation, FoundChoice, in_range, parse_numbers, DEFAULT_CULTURE
)

__all__ = [
    "Validator",
    "ValidatorResult",
    "succeed",
    "fail",
    "NONE_REASON",
    "FAILED_CONSTRAINT_REASON",
    "is_message",
    "has_text",
    "has_numbers",
    "has_number",
    "has_numbers_for",
    "has_number_for",
    "has_choice",
    "has_confirmation",
    "FoundChoice",
    "in_range",
    "parse_numbers",
    "DEFAULT_CULTURE",
]
