from typing import Any, List, Optional, TYPE_CHECKING
from pydantic import BaseModel, Field
import structlog

if TYPE_CHECKING:
    from .topic import Topic

logger = structlog.get_logger(__name__)


class TriggerResult(BaseModel):
    """An idle topic's offer to handle the current input"""
    score: float = Field(description="Confidence; zero or less never wins")
    begin_args: Optional[Any] = None


class TriggerMatch(BaseModel):
    """Winning candidate"""
    instance_id: str
    result: TriggerResult


async def select_trigger(topic: "Topic", candidate_ids: List[str]) -> Optional[TriggerMatch]:
    """Score every candidate against the current input and pick the best one

    Ties go to the candidate listed first.
    """

    context = topic.context
    best: Optional[TriggerMatch] = None

    for candidate_id in candidate_ids:
        candidate = context.topic_for(candidate_id)
        result = await candidate.get_trigger_score(context.turn_input)

        if result is None or result.score <= 0:
            continue

        if best is None or result.score > best.result.score:
            best = TriggerMatch(instance_id=candidate_id, result=result)

    logger.debug(
        "Trigger selection",
        instance_id=topic.id,
        candidates=len(candidate_ids),
        winner=best.instance_id if best else None,
        score=best.result.score if best else None
    )
    return best


async def try_triggers(topic: "Topic", candidate_ids: Optional[List[str]] = None) -> bool:
    """Begin the best-scoring idle candidate; False when nothing matched

    Candidates default to the topic's children that have not been begun.
    """

    if candidate_ids is None:
        candidate_ids = topic.children.idle()

    match = await select_trigger(topic, candidate_ids)
    if match is None:
        return False

    await topic.context.begin(match.instance_id, match.result.begin_args)
    return True
