from .channel import Channel, BufferedChannel, ConsoleChannel
from .conversation_runner import ConversationRunner

__all__ = ["Channel", "BufferedChannel", "ConsoleChannel", "ConversationRunner"]
