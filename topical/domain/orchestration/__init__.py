from .turn_context import TurnContext
from .orchestrator import TopicOrchestrator, TurnResult

__all__ = ["TurnContext", "TopicOrchestrator", "TurnResult"]
