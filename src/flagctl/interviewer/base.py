from __future__ import annotations

from typing import Protocol

from flagctl.interviewer.models import Prompt, Reply


class Interviewer(Protocol):
    """Source of operator answers: a terminal, or a script during bulk runs."""

    def ask(self, prompt: Prompt) -> Reply: ...

    def inform(self, message: str) -> None: ...
