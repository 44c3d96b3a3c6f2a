from __future__ import annotations

from collections import deque

from flagctl.interviewer.models import Prompt, Reply


class QueueInterviewer:
    """Replays a fixed list of answers in order.

    Prompts and informational messages are recorded for inspection. Once
    the answers run out every further prompt gets a closed reply, the same
    as end of input on a terminal.
    """

    def __init__(self, answers: list[str]) -> None:
        self._answers: deque[str] = deque(answers)
        self.asked: list[Prompt] = []
        self.messages: list[str] = []

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def ask(self, prompt: Prompt) -> Reply:
        self.asked.append(prompt)
        if not self._answers:
            return Reply(closed=True)
        return Reply(text=self._answers.popleft())

    def inform(self, message: str) -> None:
        self.messages.append(message)
