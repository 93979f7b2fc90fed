"""
Table-driven tests for the confirmation state machine and its renderer.

Run with:
    pytest tests/test_state.py -v
"""

from dataclasses import replace

import pytest

from gitdraft.git import DiffSummary, FileChange
from gitdraft.llm import Draft
from gitdraft.output import Style
from gitdraft.ui.state import (
    BACKSPACE,
    COMMIT_LABELS,
    CTRL_C,
    ENTER,
    ESC,
    PR_CREATE_LABELS,
    PR_UPDATE_LABELS,
    EditInput,
    Flow,
    GenerationChunk,
    GenerationFailed,
    GenerationSucceeded,
    Key,
    Session,
    SessionState,
    WriteFailed,
    WriteSucceeded,
    format_commit_lines,
    format_diff_summary,
    new_session,
    parse_commit_lines,
    render,
    transition,
)

S = SessionState
COMMIT_DRAFT = Draft(body="feat(cli): add thing\n\n- detail")
PR_DRAFT = Draft(title="Add thing", body="## Summary\nStuff")


def session_in(state: SessionState, flow: Flow = Flow.COMMIT, **kwargs) -> Session:
    session = new_session(flow)
    draft = COMMIT_DRAFT if flow is Flow.COMMIT else PR_DRAFT
    if state is not S.LOADING:
        kwargs.setdefault("draft", draft)
    return replace(session, state=state, **kwargs)


def run(session: Session, *events) -> Session:
    for event in events:
        session = transition(session, event)
    return session


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestTransitionTable:

    @pytest.mark.parametrize("start, event, expected", [
        # Generating
        (S.LOADING, GenerationSucceeded(COMMIT_DRAFT), S.CONFIRM),
        (S.LOADING, GenerationFailed("boom"), S.ERROR),
        (S.LOADING, GenerationChunk("fe"), S.STREAMING),
        (S.LOADING, Key("q"), S.CANCELLED),
        (S.LOADING, Key(CTRL_C), S.CANCELLED),
        (S.LOADING, Key(ESC), S.CANCELLED),
        (S.LOADING, Key("y"), S.LOADING),
        (S.LOADING, Key("n"), S.LOADING),
        (S.LOADING, WriteSucceeded(), S.LOADING),
        (S.STREAMING, GenerationChunk("at"), S.STREAMING),
        (S.STREAMING, GenerationSucceeded(COMMIT_DRAFT), S.CONFIRM),
        (S.STREAMING, GenerationFailed("boom"), S.ERROR),
        (S.STREAMING, Key("q"), S.CANCELLED),
        # Confirm
        (S.CONFIRM, Key("y"), S.COMMITTING),
        (S.CONFIRM, Key("Y"), S.COMMITTING),
        (S.CONFIRM, Key("e"), S.EDITING),
        (S.CONFIRM, Key("n"), S.CANCELLED),
        (S.CONFIRM, Key("q"), S.CANCELLED),
        (S.CONFIRM, Key(CTRL_C), S.CANCELLED),
        (S.CONFIRM, Key(ESC), S.CANCELLED),
        (S.CONFIRM, Key("x"), S.CONFIRM),
        (S.CONFIRM, Key(ENTER), S.CONFIRM),
        (S.CONFIRM, GenerationSucceeded(COMMIT_DRAFT), S.CONFIRM),
        (S.CONFIRM, WriteSucceeded(), S.CONFIRM),
        # Committing
        (S.COMMITTING, WriteSucceeded("done"), S.SUCCESS),
        (S.COMMITTING, WriteFailed("nope"), S.ERROR),
        (S.COMMITTING, Key("q"), S.COMMITTING),
        (S.COMMITTING, Key(CTRL_C), S.COMMITTING),
        (S.COMMITTING, Key("y"), S.COMMITTING),
    ])
    def test_commit_flow(self, start, event, expected):
        assert transition(session_in(start), event).state is expected

    @pytest.mark.parametrize("key, expected", [
        ("y", S.COMMITTING),
        ("e", S.CONFIRM),
        ("n", S.CANCELLED),
        ("q", S.CANCELLED),
    ])
    def test_pull_request_confirm(self, key, expected):
        session = session_in(S.CONFIRM, flow=Flow.PULL_REQUEST)
        assert transition(session, Key(key)).state is expected

    def test_approve_never_jumps_to_success(self):
        for flow in Flow:
            after = transition(session_in(S.CONFIRM, flow=flow), Key("y"))
            assert after.state is S.COMMITTING
            assert after.state is not S.SUCCESS


class TestTerminalStates:

    EVENTS = [
        Key("y"), Key("e"), Key("n"), Key("q"), Key(CTRL_C), Key(ENTER), Key(ESC),
        EditInput("text"),
        GenerationChunk("x"),
        GenerationSucceeded(COMMIT_DRAFT),
        GenerationFailed("x"),
        WriteSucceeded("x"),
        WriteFailed("x"),
    ]

    @pytest.mark.parametrize("state", [S.SUCCESS, S.ERROR, S.CANCELLED])
    @pytest.mark.parametrize("event", EVENTS)
    def test_no_transitions_after_terminal(self, state, event):
        session = session_in(state, error="old", detail="kept")
        assert transition(session, event) == session

    def test_success_reached_once(self):
        session = run(
            new_session(Flow.COMMIT),
            GenerationSucceeded(COMMIT_DRAFT),
            Key("y"),
            WriteSucceeded("first"),
            WriteSucceeded("second"),
            WriteFailed("late"),
        )
        assert session.state is S.SUCCESS
        assert session.detail == "first"
        assert session.error == ""


class TestSessionData:

    def test_generation_success_stores_draft_and_clears_stream(self):
        session = run(new_session(Flow.COMMIT), GenerationChunk("feat"), GenerationChunk(": x"))
        assert session.streamed == "feat: x"
        session = transition(session, GenerationSucceeded(COMMIT_DRAFT))
        assert session.draft == COMMIT_DRAFT
        assert session.streamed == ""

    def test_generation_failure_keeps_message(self):
        session = transition(new_session(Flow.COMMIT), GenerationFailed("model offline"))
        assert session.error == "model offline"

    def test_write_failure_keeps_message(self):
        session = transition(session_in(S.COMMITTING), WriteFailed("hook rejected"))
        assert session.state is S.ERROR
        assert session.error == "hook rejected"

    def test_write_success_keeps_detail(self):
        session = transition(session_in(S.COMMITTING), WriteSucceeded("[main abc123] feat"))
        assert session.detail == "[main abc123] feat"

    def test_default_labels_follow_flow(self):
        assert new_session(Flow.COMMIT).labels is COMMIT_LABELS
        assert new_session(Flow.PULL_REQUEST).labels is PR_CREATE_LABELS
        assert new_session(Flow.PULL_REQUEST, PR_UPDATE_LABELS).labels is PR_UPDATE_LABELS


class TestEditing:

    @pytest.fixture
    def editing(self):
        return transition(session_in(S.CONFIRM), Key("e"))

    def test_enter_editing_seeds_buffer(self, editing):
        assert editing.state is S.EDITING
        assert editing.edit_buffer == COMMIT_DRAFT.body
        assert editing.original_body == COMMIT_DRAFT.body

    def test_typing_and_backspace(self, editing):
        session = run(editing, EditInput(""), Key("f"), Key("i"), Key("x"), Key(BACKSPACE), Key("X"))
        assert session.edit_buffer == "fiX"

    def test_control_keys_are_not_typed(self, editing):
        session = run(editing, EditInput("abc"), Key("ctrl+z"), Key("up"))
        assert session.edit_buffer == "abc"

    def test_enter_commits_edit(self, editing):
        session = run(editing, EditInput("fix: better message"), Key(ENTER))
        assert session.state is S.CONFIRM
        assert session.draft.body == "fix: better message"
        assert session.edit_buffer == ""

    def test_enter_with_empty_buffer_keeps_original(self, editing):
        session = run(editing, EditInput("   "), Key(ENTER))
        assert session.state is S.CONFIRM
        assert session.draft.body == COMMIT_DRAFT.body

    @pytest.mark.parametrize("cancel", [ESC, CTRL_C])
    def test_cancel_restores_original_exactly(self, editing, cancel):
        session = run(editing, EditInput("something else entirely"), Key(cancel))
        assert session.state is S.CONFIRM
        assert session.draft.body == COMMIT_DRAFT.body

    def test_cancel_after_earlier_edit_restores_edited_text(self, editing):
        session = run(editing, EditInput("fix: first edit"), Key(ENTER), Key("e"),
                      EditInput("fix: second"), Key(ESC))
        assert session.draft.body == "fix: first edit"

    def test_q_is_typed_not_cancel(self, editing):
        session = run(editing, EditInput(""), Key("q"))
        assert session.state is S.EDITING
        assert session.edit_buffer == "q"

    def test_edit_then_approve(self, editing):
        session = run(editing, EditInput("docs: tidy"), Key(ENTER), Key("y"), WriteSucceeded())
        assert session.state is S.SUCCESS
        assert session.draft.body == "docs: tidy"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

PLAIN = Style(color=False, unicode=True)
SUMMARY = DiffSummary(files=(
    FileChange("src/app.py", added_lines=10, deleted_lines=2),
    FileChange("README.md", added_lines=1),
))


class TestRender:

    def test_is_deterministic(self):
        session = session_in(S.CONFIRM)
        assert render(session, SUMMARY, PLAIN) == render(session, SUMMARY, PLAIN)

    def test_loading_shows_context_and_label(self):
        frame = render(new_session(Flow.COMMIT), SUMMARY, PLAIN)
        assert "src/app.py (+10, -2)" in frame
        assert "README.md (+1)" in frame
        assert COMMIT_LABELS.loading in frame

    def test_spinner_frame_advances(self):
        session = new_session(Flow.COMMIT)
        assert render(session, SUMMARY, PLAIN, frame=0) != render(session, SUMMARY, PLAIN, frame=1)

    def test_streaming_shows_partial_text(self):
        session = transition(new_session(Flow.COMMIT), GenerationChunk("feat(ui): part"))
        assert "feat(ui): part" in render(session, SUMMARY, PLAIN)

    def test_confirm_shows_draft_and_prompt(self):
        frame = render(session_in(S.CONFIRM), SUMMARY, PLAIN)
        assert COMMIT_LABELS.header in frame
        assert "feat(cli): add thing" in frame
        assert "- detail" in frame
        assert frame.rstrip().endswith(COMMIT_LABELS.confirm_prompt)

    def test_pull_request_confirm_shows_title_and_commits(self):
        session = session_in(S.CONFIRM, flow=Flow.PULL_REQUEST)
        frame = render(session, SUMMARY, PLAIN, commits=("abc1234 Add thing",))
        assert "Add thing" in frame
        assert "## Summary" in frame
        assert "abc1234 Add thing" in frame
        assert PR_CREATE_LABELS.confirm_prompt in frame

    def test_body_override(self):
        session = session_in(S.CONFIRM, flow=Flow.PULL_REQUEST)
        frame = render(session, SUMMARY, PLAIN, body="RENDERED BODY")
        assert "RENDERED BODY" in frame
        assert "## Summary" not in frame

    def test_editing_shows_buffer(self):
        session = run(session_in(S.CONFIRM), Key("e"), EditInput("fix: typo"))
        frame = render(session, SUMMARY, PLAIN)
        assert "> fix: typo█" in frame
        assert "Esc to cancel" in frame

    def test_committing_shows_writing_label_only(self):
        frame = render(session_in(S.COMMITTING), SUMMARY, PLAIN)
        assert COMMIT_LABELS.writing in frame
        assert "src/app.py" not in frame

    def test_error(self):
        frame = render(session_in(S.ERROR, error="gh failed"), SUMMARY, PLAIN)
        assert frame == "✗ Error: gh failed"

    @pytest.mark.parametrize("state", [S.SUCCESS, S.CANCELLED])
    def test_quiet_terminal_states(self, state):
        assert render(session_in(state), SUMMARY, PLAIN) == ""

    def test_plain_style_has_no_escape_codes(self):
        for state in (S.LOADING, S.CONFIRM, S.COMMITTING, S.ERROR):
            assert "\033[" not in render(session_in(state, error="x"), SUMMARY, PLAIN)

    def test_color_style_adds_escape_codes(self):
        frame = render(session_in(S.CONFIRM), SUMMARY, Style(color=True, unicode=True))
        assert "\033[" in frame


class TestFormatting:

    def test_diff_summary_collapses_long_lists(self):
        summary = DiffSummary(files=tuple(FileChange(f"f{i}.py", added_lines=1) for i in range(5)))
        text = format_diff_summary(summary, PLAIN, max_files=2)
        assert "f1.py" in text
        assert "f2.py" not in text
        assert "... and 3 more files" in text

    def test_empty_summary_renders_nothing(self):
        assert format_diff_summary(DiffSummary(), PLAIN) == ""

    def test_file_without_counts(self):
        text = format_diff_summary(DiffSummary(files=(FileChange("b.txt"),)), PLAIN)
        assert text.splitlines()[-1].endswith("b.txt")

    def test_commit_lines(self):
        commits = parse_commit_lines("abc1 first\n\n  def2 second  \n")
        assert commits == ("abc1 first", "def2 second")
        text = format_commit_lines(commits, PLAIN)
        assert "• abc1 first" in text
        assert format_commit_lines((), PLAIN) == ""

    def test_ascii_style_symbols(self):
        ascii_style = Style(color=False, unicode=False)
        text = format_diff_summary(SUMMARY, ascii_style)
        assert "•" not in text
