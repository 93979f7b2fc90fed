"""
Tests for the line-oriented confirmation front-end and the shared runner.

Collaborators are plain functions; stdin is a StringIO so keys are read a
line at a time.

Run with:
    pytest tests/test_confirmation.py -v
"""

import io

import pytest

import gitdraft.ui as ui
from gitdraft.git import DiffSummary, FileChange, GitError
from gitdraft.llm import Draft, LLMError
from gitdraft.output import Style
from gitdraft.ui import (
    PR_CREATE_LABELS,
    Flow,
    PromptConfirmation,
    SessionState,
    confirmation_for,
    new_session,
)

PLAIN = Style(color=False, unicode=True)
SUMMARY = DiffSummary(files=(FileChange("src/app.py", added_lines=3, deleted_lines=1),))
DRAFT = Draft(body="feat(app): add greeting\n\n- say hello")


class FakeCollaborators:
    """Records calls; fails on demand."""

    def __init__(self, draft=DRAFT, generate_error=None, write_error=None):
        self.draft = draft
        self.generate_error = generate_error
        self.write_error = write_error
        self.generated = 0
        self.written: list[Draft] = []

    def generate(self, on_chunk=None):
        self.generated += 1
        if self.generate_error:
            raise self.generate_error
        return self.draft

    def write(self, draft):
        self.written.append(draft)
        if self.write_error:
            raise self.write_error
        return "[main 1a2b3c4] feat(app): add greeting"


@pytest.fixture
def fakes():
    return FakeCollaborators()


def make_runner(fakes, keys: str, flow=Flow.COMMIT, editor=None, labels=None, **kwargs):
    out = io.StringIO()
    runner = PromptConfirmation(
        new_session(flow, labels),
        fakes.generate,
        fakes.write,
        SUMMARY,
        PLAIN,
        out=out,
        stream=io.StringIO(keys),
        editor=editor or (lambda body: None),
        **kwargs,
    )
    return runner, out


class TestPromptConfirmation:

    def test_approve_writes_draft(self, fakes):
        runner, out = make_runner(fakes, "y\n")
        result = runner.run()

        assert result.succeeded
        assert result.state is SessionState.SUCCESS
        assert fakes.written == [DRAFT]
        assert result.detail.startswith("[main 1a2b3c4]")
        assert "Commit this message? (y)es / (e)dit / (n)o" in out.getvalue()

    def test_context_printed_before_draft(self, fakes):
        runner, out = make_runner(fakes, "y\n")
        runner.run()
        text = out.getvalue()
        assert text.index("src/app.py") < text.index("feat(app): add greeting")

    @pytest.mark.parametrize("keys", ["n\n", "q\n", ""])
    def test_reject_or_eof_cancels(self, fakes, keys):
        runner, _ = make_runner(fakes, keys)
        result = runner.run()

        assert result.cancelled
        assert fakes.written == []

    def test_unknown_keys_are_ignored(self, fakes):
        runner, _ = make_runner(fakes, "x\n\nz\ny\n")
        result = runner.run()
        assert result.succeeded

    def test_edit_replaces_body(self, fakes):
        runner, _ = make_runner(fakes, "e\ny\n", editor=lambda body: "fix(app): better greeting")
        result = runner.run()

        assert result.succeeded
        assert fakes.written == [Draft(body="fix(app): better greeting")]

    def test_editor_receives_current_body(self, fakes):
        seen = []

        def editor(body):
            seen.append(body)
            return None

        runner, _ = make_runner(fakes, "e\nn\n", editor=editor)
        runner.run()
        assert seen == [DRAFT.body]

    def test_failed_edit_keeps_original(self, fakes):
        runner, _ = make_runner(fakes, "e\ny\n", editor=lambda body: None)
        result = runner.run()
        assert result.draft == DRAFT
        assert fakes.written == [DRAFT]

    def test_edit_key_ignored_for_pull_requests(self):
        fakes = FakeCollaborators(draft=Draft(title="Add greeting", body="## Summary"))
        called = []
        runner, _ = make_runner(fakes, "e\ny\n", flow=Flow.PULL_REQUEST,
                                editor=lambda body: called.append(body))
        result = runner.run()

        assert result.succeeded
        assert called == []

    def test_generation_failure_is_terminal(self):
        fakes = FakeCollaborators(generate_error=LLMError("model offline"))
        runner, _ = make_runner(fakes, "y\n")
        result = runner.run()

        assert result.state is SessionState.ERROR
        assert result.error == "model offline"
        assert fakes.written == []

    def test_write_failure_is_terminal(self):
        fakes = FakeCollaborators(write_error=GitError("pre-commit hook failed"))
        runner, _ = make_runner(fakes, "y\n")
        result = runner.run()

        assert result.state is SessionState.ERROR
        assert result.error == "pre-commit hook failed"
        assert len(fakes.written) == 1

    def test_provider_auth_failure_is_terminal(self):
        sdk = pytest.importorskip("google.auth.exceptions")
        pytest.importorskip("google.genai")
        from gitdraft.llm import DraftGenerator, VertexClient
        from gitdraft.git import DiffProcessor

        class Models:
            def generate_content(self, **kwargs):
                raise sdk.DefaultCredentialsError("Your default credentials were not found")

        client = VertexClient.__new__(VertexClient)
        client.model, client.project_id, client.location = "gemini", "my-project", "us-central1"
        client._client = type("FakeGenAI", (), {"models": Models()})()
        generator = DraftGenerator(client)
        processed = DiffProcessor().process("diff --git a/src/app.py b/src/app.py\n+x\n")

        fakes = FakeCollaborators()
        fakes.generate = lambda on_chunk=None: generator.generate_commit_message(processed)
        runner, _ = make_runner(fakes, "y\n")
        result = runner.run()

        assert result.state is SessionState.ERROR
        assert "Vertex AI authentication failed" in result.error
        assert fakes.written == []

    def test_programming_error_propagates(self):
        fakes = FakeCollaborators(generate_error=ValueError("bug"))
        runner, _ = make_runner(fakes, "y\n")
        with pytest.raises(ValueError, match="bug"):
            runner.run()

    def test_generates_exactly_once(self, fakes):
        runner, _ = make_runner(fakes, "e\ny\n", editor=lambda body: "fix: x")
        runner.run()
        assert fakes.generated == 1

    def test_body_renderer_used_for_display(self):
        fakes = FakeCollaborators(draft=Draft(title="Add greeting", body="## Summary"))
        runner, out = make_runner(
            fakes, "y\n", flow=Flow.PULL_REQUEST, labels=PR_CREATE_LABELS,
            body_renderer=lambda text, style: text.upper(),
        )
        result = runner.run()

        assert "## SUMMARY" in out.getvalue()
        # The draft itself is untouched
        assert result.draft.body == "## Summary"


class TestConfirmationFor:

    def test_prompt_mode(self, fakes):
        runner = confirmation_for("prompt", new_session(Flow.COMMIT), fakes.generate, fakes.write,
                                  SUMMARY, PLAIN)
        assert isinstance(runner, PromptConfirmation)

    def test_tui_falls_back_without_terminal(self, fakes, monkeypatch):
        monkeypatch.setattr(ui, "_has_terminal", lambda: False)
        runner = confirmation_for("tui", new_session(Flow.COMMIT), fakes.generate, fakes.write,
                                  SUMMARY, PLAIN)
        assert isinstance(runner, PromptConfirmation)

    def test_tui_mode_with_terminal(self, fakes, monkeypatch):
        pytest.importorskip("curses")
        from gitdraft.ui.tui import CursesConfirmation

        monkeypatch.setattr(ui, "_has_terminal", lambda: True)
        runner = confirmation_for("tui", new_session(Flow.COMMIT), fakes.generate, fakes.write,
                                  SUMMARY, PLAIN)
        assert isinstance(runner, CursesConfirmation)
