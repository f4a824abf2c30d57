"""
Tests for the topic registry lifecycle.
"""
import pytest

from topical.domain.errors import RegistryFrozenError, TopicRegistrationError, UnknownTopicTypeError
from topical.domain.topic import Topic, TopicRegistry, TextPrompt, topic_registry, register_topic


class Alpha(Topic):
    pass


class Beta(Topic):
    pass


class Named(Topic):
    topic_name = "custom-name"


class TestRegistry:

    def test_register_and_resolve(self):
        registry = TopicRegistry()
        registry.register(Alpha)

        assert registry.resolve("Alpha") is Alpha
        assert registry.name_of(Alpha) == "Alpha"
        assert "Alpha" in registry
        assert Alpha in registry

    def test_topic_name_attribute_and_explicit_name(self):
        registry = TopicRegistry()
        registry.register(Named)
        registry.register(Beta, name="beta")

        assert registry.resolve("custom-name") is Named
        assert registry.name_of(Beta) == "beta"
        assert registry.list_topics() == ["beta", "custom-name"]

    def test_same_class_twice_is_a_no_op(self):
        registry = TopicRegistry()
        registry.register(Alpha)
        registry.register(Alpha)

        assert registry.list_topics() == ["Alpha"]

    def test_name_clash_with_different_class(self):
        registry = TopicRegistry()
        registry.register(Alpha, name="shared")

        with pytest.raises(TopicRegistrationError):
            registry.register(Beta, name="shared")

    def test_frozen_registry_rejects_new_topics(self):
        registry = TopicRegistry()
        registry.register(Alpha)
        registry.freeze()

        registry.register(Alpha)
        with pytest.raises(RegistryFrozenError):
            registry.register(Beta)

    def test_unknown_type(self):
        registry = TopicRegistry()

        with pytest.raises(UnknownTopicTypeError):
            registry.resolve("Missing")
        with pytest.raises(UnknownTopicTypeError):
            registry.name_of(Alpha)
        with pytest.raises(UnknownTopicTypeError):
            registry.create("Missing")

    def test_create_passes_constructor_args(self):
        registry = TopicRegistry()
        registry.register(TextPrompt)

        prompt = registry.create("TextPrompt", {"max_turns": 5})

        assert isinstance(prompt, TextPrompt)
        assert prompt.get_max_turns() == 5


class TestProcessWideRegistry:

    def test_builtins_are_registered(self):
        assert topic_registry.resolve("TextPrompt") is TextPrompt
        assert "SimpleForm" in topic_registry

    def test_decorator(self):
        @register_topic(name="decorated-test-topic")
        class Decorated(Topic):
            pass

        assert topic_registry.resolve("decorated-test-topic") is Decorated
