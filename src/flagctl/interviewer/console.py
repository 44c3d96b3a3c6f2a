from __future__ import annotations

import sys

from prompt_toolkit import prompt as pt_prompt

from flagctl.interviewer.models import Choice, Prompt, PromptKind, Reply


class ConsoleInterviewer:
    def __init__(self, *, interactive: bool | None = None) -> None:
        # Piped stdin (scripted replay) must not go through prompt_toolkit.
        self._interactive = sys.stdin.isatty() if interactive is None else interactive

    def ask(self, prompt: Prompt) -> Reply:
        print(f"[?] {prompt.text}", flush=True)
        if prompt.kind == PromptKind.CHOICE:
            for choice in prompt.choices:
                print(f"  [{choice.key}] {choice.label}", flush=True)
            response = self._read_input("Select: ")
        elif prompt.kind == PromptKind.CONFIRM:
            response = self._read_input("[y/n]: ")
        else:
            response = self._read_input("> ")

        if response is None:
            return Reply(closed=True)
        if prompt.kind == PromptKind.CHOICE:
            matched = _match_label(response, prompt.choices)
            if matched is not None:
                return Reply(text=matched.key)
        return Reply(text=response)

    def inform(self, message: str) -> None:
        print(f"[i] {message}", flush=True)

    def _read_input(self, label: str) -> str | None:
        try:
            if self._interactive:
                return pt_prompt(label)
            return input(label)
        except (EOFError, KeyboardInterrupt):
            return None


def _match_label(response: str, choices: list[Choice]) -> Choice | None:
    wanted = response.strip().lower()
    for choice in choices:
        if wanted == choice.label.lower():
            return choice
    return None
