from typing import List, Optional, Protocol, TextIO, runtime_checkable
import sys
import structlog

from topical.domain.models.activity import ActivityType, OutgoingMessage

logger = structlog.get_logger(__name__)


@runtime_checkable
class Channel(Protocol):
    """Where a turn's replies go"""

    async def send(self, output: OutgoingMessage) -> None:
        ...


class BufferedChannel:
    """Collects replies in memory; hosts drain it after each turn"""

    def __init__(self):
        self.outputs: List[OutgoingMessage] = []

    async def send(self, output: OutgoingMessage) -> None:
        self.outputs.append(output)

    @property
    def texts(self) -> List[str]:
        return [output.text for output in self.outputs if output.text is not None]

    def drain(self) -> List[OutgoingMessage]:
        """Return and forget everything sent so far"""
        outputs, self.outputs = self.outputs, []
        return outputs


class ConsoleChannel:
    """Prints replies to a terminal, quoting each line with "> " """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._first_in_turn = True

    def start_turn(self):
        self._first_in_turn = True

    def format(self, output: OutgoingMessage) -> str:
        text = "> " + (output.text or "").replace("\n", "\n> ") + "\n"
        if output.suggested_actions:
            text += "> [" + " | ".join(output.suggested_actions) + "]\n"
        if self._first_in_turn:
            text = "\n" + text
            self._first_in_turn = False
        return text

    async def send(self, output: OutgoingMessage) -> None:
        if output.type != ActivityType.MESSAGE.value:
            logger.debug("Skipping non-message output", output_type=output.type)
            return
        self.stream.write(self.format(output))
        self.stream.flush()
