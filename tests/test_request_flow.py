import pytest

from flagctl.exceptions import ValidationError
from flagctl.interviewer.models import PromptKind
from flagctl.interviewer.queue import QueueInterviewer
from flagctl.interviewer.request_flow import collect_request, scripted_answers
from flagctl.models.request import EnvironmentClass, Operation


def test_scripted_answers_order() -> None:
    assert scripted_answers("add", "FEATURE_X", "svc", "prod") == [
        "add",
        "FEATURE_X",
        "svc",
        "prod",
        "y",
    ]


def test_scripted_answers_drive_collect_request() -> None:
    interviewer = QueueInterviewer(scripted_answers("remove", "FEATURE_X", "svc", "non-prod"))

    request = collect_request(interviewer, projects=["svc"])

    assert request is not None
    assert request.operation == Operation.REMOVE
    assert request.flag_name == "FEATURE_X"
    assert request.project_name == "svc"
    assert request.environment_class == EnvironmentClass.NON_PROD
    assert [p.kind for p in interviewer.asked] == [
        PromptKind.CHOICE,
        PromptKind.TEXT,
        PromptKind.TEXT,
        PromptKind.CHOICE,
        PromptKind.CONFIRM,
    ]
    assert interviewer.remaining == 0
    assert any("Summary:" in m for m in interviewer.messages)


def test_declining_confirmation_returns_none() -> None:
    interviewer = QueueInterviewer(["add", "FEATURE_X", "svc", "prod", "n"])
    assert collect_request(interviewer, projects=["svc"]) is None


def test_closed_input_at_confirmation_returns_none() -> None:
    interviewer = QueueInterviewer(["add", "FEATURE_X", "svc", "prod"])
    assert collect_request(interviewer, projects=["svc"]) is None


def test_supplied_values_are_not_asked() -> None:
    interviewer = QueueInterviewer([])

    request = collect_request(
        interviewer,
        projects=["svc"],
        operation="add",
        flag_name="FEATURE_X",
        project="svc",
        environment="prod",
        confirm=False,
    )

    assert request is not None
    assert interviewer.asked == []


def test_choice_is_case_insensitive() -> None:
    interviewer = QueueInterviewer(["ADD", "FEATURE_X", "svc", "Non-Prod", "Y"])
    request = collect_request(interviewer, projects=["svc"])
    assert request is not None
    assert request.environment_class == EnvironmentClass.NON_PROD


def test_invalid_choice_is_reasked() -> None:
    interviewer = QueueInterviewer(["toggle", "add", "FEATURE_X", "svc", "prod", "yes"])

    request = collect_request(interviewer, projects=["svc"])

    assert request is not None
    assert request.operation == Operation.ADD
    assert any("Please enter one of" in m for m in interviewer.messages)


def test_repeated_invalid_choice_raises() -> None:
    interviewer = QueueInterviewer(["x", "y", "z"])
    with pytest.raises(ValidationError):
        collect_request(interviewer, projects=[])


def test_closed_input_stops_reasking() -> None:
    interviewer = QueueInterviewer([])
    with pytest.raises(ValidationError):
        collect_request(interviewer, projects=[])
    assert len(interviewer.asked) == 1


def test_empty_flag_name_raises() -> None:
    interviewer = QueueInterviewer(["add", ""])
    with pytest.raises(ValidationError, match="Feature flag name"):
        collect_request(interviewer, projects=[])


def test_unknown_project_warns_but_continues() -> None:
    interviewer = QueueInterviewer(scripted_answers("add", "FEATURE_X", "ghost", "prod"))

    request = collect_request(interviewer, projects=["svc"])

    assert request is not None
    assert request.project_name == "ghost"
    assert any("'ghost' not found" in m for m in interviewer.messages)


def test_project_preview_is_truncated() -> None:
    projects = [f"p{i:02d}" for i in range(15)]
    interviewer = QueueInterviewer(scripted_answers("add", "FEATURE_X", "p00", "prod"))

    collect_request(interviewer, projects=projects)

    listing = next(m for m in interviewer.messages if m.startswith("Available projects"))
    assert "p09" in listing
    assert "p10" not in listing
    assert "and 5 more" in listing
