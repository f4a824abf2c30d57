"""topical: hierarchical dialog orchestration over persisted topic trees"""

from topical.domain.models.activity import TurnInput, OutgoingMessage
from topical.domain.orchestration.orchestrator import TopicOrchestrator, TurnResult
from topical.domain.topic import (
    Topic, Waterfall, Prompt, PromptReturn, TextPrompt, NumberPrompt, ChoicePrompt,
    ConfirmPrompt, SimpleForm, TriggerResult, TopicRegistry, topic_registry, register_topic
)
from topical.domain.validation import Validator, ValidatorResult
from topical.infrastructure.storage.memory_storage import MemoryStorage
from topical.infrastructure.storage.sqlite_storage import SqliteStorage

__version__ = "0.1.0"

__all__ = [
    "TurnInput",
    "OutgoingMessage",
    "TopicOrchestrator",
    "TurnResult",
    "Topic",
    "Waterfall",
    "Prompt",
    "PromptReturn",
    "TextPrompt",
    "NumberPrompt",
    "ChoicePrompt",
    "ConfirmPrompt",
    "SimpleForm",
    "TriggerResult",
    "TopicRegistry",
    "topic_registry",
    "register_topic",
    "Validator",
    "ValidatorResult",
    "MemoryStorage",
    "SqliteStorage",
]
