from __future__ import annotations

from flagctl.exceptions import ValidationError
from flagctl.interviewer.base import Interviewer
from flagctl.interviewer.models import Choice, Prompt, PromptKind
from flagctl.models.request import FeatureFlagRequest, make_request

MAX_ATTEMPTS = 3
PROJECT_PREVIEW = 10

OPERATION_CHOICES = [
    Choice(key="add", label="Add a feature flag"),
    Choice(key="remove", label="Remove a feature flag"),
]
ENVIRONMENT_CHOICES = [
    Choice(key="prod", label="prod"),
    Choice(key="non-prod", label="main, ondemand, stage, preprod"),
]


def scripted_answers(
    operation: str, flag_name: str, project: str, environment_class: str
) -> list[str]:
    """The answers ``collect_request`` expects, in the order it asks for them."""
    return [operation, flag_name, project, environment_class, "y"]


def _ask_choice(interviewer: Interviewer, text: str, choices: list[Choice]) -> str:
    keys = [c.key for c in choices]
    prompt = Prompt(text=text, kind=PromptKind.CHOICE, choices=choices)
    for _ in range(MAX_ATTEMPTS):
        reply = interviewer.ask(prompt)
        if reply.closed:
            break
        value = reply.value.lower()
        if value in keys:
            return value
        interviewer.inform(f"Please enter one of: {', '.join(keys)}")
    raise ValidationError(f"No valid answer to {text!r} (expected one of: {', '.join(keys)})")


def _ask_text(interviewer: Interviewer, text: str, what: str) -> str:
    reply = interviewer.ask(Prompt(text=text, kind=PromptKind.TEXT))
    if not reply.value:
        raise ValidationError(f"{what} is required")
    return reply.value


def _show_projects(interviewer: Interviewer, projects: list[str]) -> None:
    if not projects:
        return
    lines = [f"  {i}. {name}" for i, name in enumerate(projects[:PROJECT_PREVIEW], 1)]
    if len(projects) > PROJECT_PREVIEW:
        lines.append(f"  ... and {len(projects) - PROJECT_PREVIEW} more")
    interviewer.inform("Available projects:\n" + "\n".join(lines))


def collect_request(
    interviewer: Interviewer,
    *,
    projects: list[str],
    operation: str | None = None,
    flag_name: str | None = None,
    project: str | None = None,
    environment: str | None = None,
    confirm: bool = True,
) -> FeatureFlagRequest | None:
    """Gather a request, asking only for values not already supplied.

    Questions come in a fixed order: operation, flag name, project,
    environment class, then confirmation. A project missing from
    ``projects`` is reported but accepted. Returns None when the operator
    declines the confirmation.
    """
    op = operation or _ask_choice(interviewer, "Add or remove a feature flag?", OPERATION_CHOICES)
    flag = flag_name or _ask_text(interviewer, "What is the feature flag name?", "Feature flag name")

    if project is None:
        _show_projects(interviewer, projects)
        project = _ask_text(interviewer, "What project is this for?", "Project name")
    if projects and project not in projects:
        interviewer.inform(f"Project '{project}' not found in the applications directory; continuing anyway")

    env = environment or _ask_choice(
        interviewer, 'Is this for "prod" or "non-prod" environments?', ENVIRONMENT_CHOICES
    )

    request = make_request(op.lower(), flag, project, env.lower())

    if confirm:
        interviewer.inform(
            "Summary:\n"
            f"  Operation: {request.operation.value}\n"
            f"  Feature Flag: {request.flag_name}\n"
            f"  Project: {request.project_name}\n"
            f"  Environment Type: {request.environment_class.value}"
        )
        reply = interviewer.ask(Prompt(text="Proceed with these settings?", kind=PromptKind.CONFIRM))
        if not reply.is_yes:
            return None
    return request
