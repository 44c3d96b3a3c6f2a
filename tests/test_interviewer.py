from flagctl.interviewer.console import ConsoleInterviewer
from flagctl.interviewer.models import Choice, Prompt, PromptKind, Reply
from flagctl.interviewer.queue import QueueInterviewer

CHOICES = [
    Choice(key="add", label="Add a feature flag"),
    Choice(key="remove", label="Remove a feature flag"),
]


class TestReply:
    def test_value_is_stripped(self):
        assert Reply(text="  FEATURE_X \n").value == "FEATURE_X"

    def test_is_yes(self):
        assert Reply(text="Y").is_yes
        assert Reply(text="yes ").is_yes
        assert not Reply(text="yep").is_yes
        assert not Reply(closed=True).is_yes


class TestQueueInterviewer:
    def test_answers_in_sequence(self):
        interviewer = QueueInterviewer(["add", "FEATURE_X"])
        op = Prompt(text="Op?", kind=PromptKind.CHOICE, choices=CHOICES)
        flag = Prompt(text="Flag?", kind=PromptKind.TEXT)

        assert interviewer.ask(op).text == "add"
        assert interviewer.ask(flag).text == "FEATURE_X"
        assert interviewer.asked == [op, flag]
        assert interviewer.remaining == 0

    def test_exhausted_queue_is_closed(self):
        reply = QueueInterviewer([]).ask(Prompt(text="Anything?", kind=PromptKind.TEXT))
        assert reply.closed
        assert reply.value == ""

    def test_records_messages(self):
        interviewer = QueueInterviewer([])
        interviewer.inform("hello")
        assert interviewer.messages == ["hello"]


class TestConsoleInterviewer:
    def _with_input(self, monkeypatch, *responses):
        feed = iter(responses)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(feed))
        return ConsoleInterviewer(interactive=False)

    def test_choice_lists_options(self, monkeypatch, capsys):
        interviewer = self._with_input(monkeypatch, "add")
        reply = interviewer.ask(Prompt(text="Add or remove?", kind=PromptKind.CHOICE, choices=CHOICES))
        assert reply.text == "add"
        out = capsys.readouterr().out
        assert "[?] Add or remove?" in out
        assert "[remove] Remove a feature flag" in out

    def test_choice_label_maps_to_key(self, monkeypatch):
        interviewer = self._with_input(monkeypatch, "remove a feature flag")
        reply = interviewer.ask(Prompt(text="?", kind=PromptKind.CHOICE, choices=CHOICES))
        assert reply.text == "remove"

    def test_unmatched_choice_returns_raw_text(self, monkeypatch):
        interviewer = self._with_input(monkeypatch, "toggle")
        reply = interviewer.ask(Prompt(text="?", kind=PromptKind.CHOICE, choices=CHOICES))
        assert reply.text == "toggle"

    def test_confirm(self, monkeypatch):
        interviewer = self._with_input(monkeypatch, "y", "nope")
        prompt = Prompt(text="Proceed?", kind=PromptKind.CONFIRM)
        assert interviewer.ask(prompt).is_yes
        assert not interviewer.ask(prompt).is_yes

    def test_text(self, monkeypatch):
        interviewer = self._with_input(monkeypatch, "  FEATURE_X  ")
        assert interviewer.ask(Prompt(text="Flag?", kind=PromptKind.TEXT)).value == "FEATURE_X"

    def test_eof_is_closed(self, monkeypatch):
        def eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", eof)
        reply = ConsoleInterviewer(interactive=False).ask(Prompt(text="Flag?", kind=PromptKind.TEXT))
        assert reply.closed

    def test_inform_prints(self, capsys):
        ConsoleInterviewer(interactive=False).inform("hello")
        assert "[i] hello" in capsys.readouterr().out
