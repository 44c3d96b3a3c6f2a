from flagctl.interviewer.base import Interviewer
from flagctl.interviewer.console import ConsoleInterviewer
from flagctl.interviewer.models import Choice, Prompt, PromptKind, Reply
from flagctl.interviewer.queue import QueueInterviewer

__all__ = [
    "Choice",
    "ConsoleInterviewer",
    "Interviewer",
    "Prompt",
    "PromptKind",
    "QueueInterviewer",
    "Reply",
]
