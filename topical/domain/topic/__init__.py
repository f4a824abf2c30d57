from .registry import TopicRegistry, TopicType, topic_registry, register_topic
from .topic import Topic
from .children import ChildSlot, ChildArray
from .triggers import TriggerResult, TriggerMatch, select_trigger, try_triggers
from .prompt import Prompt, PromptReturn, PromptStatus, TOO_MANY_ATTEMPTS
from .prompts import TextPrompt, NumberPrompt, ChoicePrompt, ConfirmPrompt
from .waterfall import Waterfall
from .forms import SimpleForm, FormField

BUILTIN_TOPICS = (TextPrompt, NumberPrompt, ChoicePrompt, ConfirmPrompt, SimpleForm)


def register_builtin_topics(registry: TopicRegistry = topic_registry) -> TopicRegistry:
    """Register the ready-made prompts and SimpleForm"""
    registry.register_all(*BUILTIN_TOPICS)
    return registry


register_builtin_topics()

__all__ = [
    "TopicRegistry",
    "TopicType",
    "topic_registry",
    "register_topic",
    "Topic",
    "ChildSlot",
    "ChildArray",
    "TriggerResult",
    "TriggerMatch",
    "select_trigger",
    "try_triggers",
    "Prompt",
    "PromptReturn",
    "PromptStatus",
    "TOO_MANY_ATTEMPTS",
    "TextPrompt",
    "NumberPrompt",
    "ChoicePrompt",
    "ConfirmPrompt",
    "Waterfall",
    "SimpleForm",
    "FormField",
    "BUILTIN_TOPICS",
    "register_builtin_topics",
]
