"""
Topical Error Classes

Protocol violations and table inconsistencies abort the turn.
Recognition failures are not errors; they travel as ValidatorResult.
"""


class TopicalError(Exception):
    """Base class for all runtime errors."""
    pass


class ProtocolViolationError(TopicalError):
    """Raised when a topic breaks the begin/dispatch/return protocol."""
    pass


class AlreadyReturnedError(ProtocolViolationError):
    """Raised when return_to_parent is called a second time."""

    def __init__(self, instance_id: str):
        super().__init__(f"Topic instance {instance_id} has already returned to its parent")
        self.instance_id = instance_id


class TopicNotStartedError(ProtocolViolationError):
    """Raised when a turn is dispatched to an instance that was never begun."""

    def __init__(self, instance_id: str):
        super().__init__(f"Cannot dispatch to instance {instance_id}: it has not been started")
        self.instance_id = instance_id


class RootReturnedError(ProtocolViolationError):
    """Raised when the root topic tries to return."""

    def __init__(self, instance_id: str):
        super().__init__(
            f"Root topic instance {instance_id} must not return to a nonexistent parent"
        )
        self.instance_id = instance_id


class UnknownTopicTypeError(ProtocolViolationError):
    """Raised when a type name has no registered implementation."""

    def __init__(self, type_name: str):
        super().__init__(f"Unknown topic type {type_name!r}; register it before first use")
        self.type_name = type_name


class TopicRegistrationError(ProtocolViolationError):
    """Raised when a type name is registered with a different implementation."""
    pass


class RegistryFrozenError(ProtocolViolationError):
    """Raised when the registry is mutated after the first turn."""
    pass


class ConversationAlreadyStartedError(ProtocolViolationError):
    """Raised when start_conversation is called for a conversation that has a root."""

    def __init__(self, conversation_key: str):
        super().__init__(f"Conversation {conversation_key!r} already has a root topic")
        self.conversation_key = conversation_key


class ConversationNotStartedError(ProtocolViolationError):
    """Raised when a turn arrives for a conversation with no root topic."""

    def __init__(self, conversation_key: str):
        super().__init__(f"Conversation {conversation_key!r} has no root topic; start it first")
        self.conversation_key = conversation_key


class InstanceNotFoundError(TopicalError):
    """Raised when an instance id is missing from the conversation table."""

    def __init__(self, instance_id: str):
        super().__init__(f"Unknown topic instance {instance_id}")
        self.instance_id = instance_id
