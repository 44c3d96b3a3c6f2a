from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

YES_WORDS = ("y", "yes")


class PromptKind(str, Enum):
    CHOICE = "choice"
    TEXT = "text"
    CONFIRM = "confirm"


class Choice(BaseModel):
    key: str
    label: str


class Prompt(BaseModel):
    text: str
    kind: PromptKind
    choices: list[Choice] = Field(default_factory=list)


class Reply(BaseModel):
    """Raw operator input for one prompt.

    ``closed`` is set when the input stream ended before an answer arrived.
    """

    text: str = ""
    closed: bool = False

    @property
    def value(self) -> str:
        return self.text.strip()

    @property
    def is_yes(self) -> bool:
        return self.value.lower() in YES_WORDS
