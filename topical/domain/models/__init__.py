from .topic_instance import ReturnStatus, TopicInstance, ConversationTopicTable, new_instance_id
from .activity import ActivityType, TurnInput, OutgoingMessage, Output, to_outgoing

__all__ = [
    "ReturnStatus",
    "TopicInstance",
    "ConversationTopicTable",
    "new_instance_id",
    "ActivityType",
    "TurnInput",
    "OutgoingMessage",
    "Output",
    "to_outgoing",
]
